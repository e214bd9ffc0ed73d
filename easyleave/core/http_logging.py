import time
from flask import g, request
from .logging import get_logger

log = get_logger("http")

def install_http_logging(app):
    @app.before_request
    def _t0():
        g._t0 = time.time()

    @app.after_request
    def _log(resp):
        dur = int((time.time() - g.get("_t0", time.time())) * 1000)
        actor = g.get("actor")
        log.info("http_request",
                 method=request.method,
                 path=request.path,
                 status=resp.status_code,
                 duration_ms=dur,
                 actor_id=actor.id if actor else None)
        return resp
