from typing import Any, Dict

from flask import Flask, current_app, session

from prepwise.core.async_runner import run_async_in_new_loop
from prepwise.core.errors import AuthenticationError

def register_routes(app: Flask):
    from .health import health_bp
    from .auth import auth_bp
    from .interviews import interviews_bp
    from .calls import calls_bp
    from .vapi import vapi_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(interviews_bp)
    app.register_blueprint(calls_bp)
    app.register_blueprint(vapi_bp)

def get_services():
    return current_app.extensions['prepwise']

def require_user() -> Dict[str, Any]:
    """Return the signed-in user or raise AuthenticationError."""
    user = run_async_in_new_loop(get_services().auth.get_current_user(session.get('user_id')))
    if not user:
        raise AuthenticationError()
    return user
