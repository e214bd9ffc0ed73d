from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from dotenv import load_dotenv

from easyleave.core.config import LeavePolicy, load_settings
from easyleave.core.errors import LeaveError
from easyleave.core.logging import setup_logging, get_logger
from easyleave.core.http_logging import install_http_logging


db = SQLAlchemy()
migrate = Migrate()

def create_app(overrides: dict | None = None, notifier=None, clock=None):
    load_dotenv()

    settings = load_settings(overrides)
    setup_logging(settings["LOG_LEVEL"])
    log = get_logger("bootstrap")


    app = Flask(__name__)
    app.config.update(settings)
    app.config["SQLALCHEMY_DATABASE_URI"] = settings["DATABASE_URL"]
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["TOKEN_TTL_MIN"] = int(settings["TOKEN_TTL_MIN"])

    db.init_app(app)
    migrate.init_app(app, db)

    from easyleave.core.calendar import utcnow
    from easyleave.core.notifications import LogNotifier
    from easyleave.database import models

    app.extensions["easyleave.policy"] = LeavePolicy.from_config(app.config)
    app.extensions["easyleave.notifier"] = notifier or LogNotifier()
    app.extensions["easyleave.clock"] = clock or utcnow

    from easyleave.api.routers.requests import bp as requests_bp
    from easyleave.api.routers.employees import bp as employees_bp
    from easyleave.api.routers.stats import bp as stats_bp

    app.register_blueprint(requests_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(stats_bp)

    install_http_logging(app)

    @app.route("/")
    def index():
        return "EasyLeave - Connected"

    @app.errorhandler(LeaveError)
    def _leave_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(401)
    def _unauth(e):
        return jsonify({"error": "Unauthorized"}), 401

    @app.errorhandler(403)
    def _forbidden(e):
        return jsonify({"error": "Forbidden"}), 403

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify({"error": "Not found"}), 404

    log.info("App started successfully",
             db=bool(app.config["SQLALCHEMY_DATABASE_URI"]),
             hr_review=sorted(c.value for c in app.extensions["easyleave.policy"].hr_review_categories))

    return app
