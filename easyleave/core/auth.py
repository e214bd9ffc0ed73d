import time
import jwt
from functools import wraps
from flask import request, jsonify, g, current_app

from easyleave.core.types import Actor, Role

def _secret() -> str:
    return current_app.config.get("SECRET_KEY", "dev-secret")

def _ttl_minutes() -> int:
    try:
        return int(current_app.config.get("TOKEN_TTL_MIN", 120))
    except (TypeError, ValueError):
        return 120

def generate_token(actor: Actor) -> str:
    """signed token carrying the identity triple (id, role, name)"""
    now = int(time.time())
    payload = {
        "sub": str(actor.id),
        "role": Role(actor.role).value,
        "name": actor.name,
        "iat": now,
        "exp": now + _ttl_minutes() * 60,
    }
    return jwt.encode(payload, _secret(), algorithm="HS256")

def _decode_token(token: str) -> dict:
    return jwt.decode(token, _secret(), algorithms=["HS256"], leeway=10)

def current_actor() -> Actor | None:
    return g.get("actor")

def actor_required(*roles: Role):
    """
    checks:
        - a Bearer token is present
        - the token is valid
        - the actor has one of the given roles (any role when none are given)
    Attaches the actor to g.actor
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                return jsonify({"error": "Missing Bearer token"}), 401
            token = auth.split(" ", 1)[1].strip()

            try:
                data = _decode_token(token)
            except jwt.ExpiredSignatureError:
                return jsonify({"error": "Token has expired"}), 401
            except jwt.InvalidSignatureError:
                return jsonify({"error": "Invalid token", "detail": "signature failed"}), 401
            except jwt.DecodeError:
                return jsonify({"error": "Invalid token", "detail": "malformed"}), 401
            except jwt.InvalidTokenError as e:
                return jsonify({"error": "Invalid token", "detail": str(e)}), 401

            try:
                actor = Actor(id=int(data["sub"]), role=Role(data["role"]), name=data.get("name", ""))
            except (KeyError, ValueError):
                return jsonify({"error": "Invalid token", "detail": "bad identity claims"}), 401

            if roles and actor.role not in roles:
                allowed = ", ".join(r.value for r in roles)
                return jsonify({"error": f"{allowed} role required"}), 403

            g.actor = actor
            return fn(*args, **kwargs)
        return wrapper
    return decorator
