"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with all blueprints, middleware, and configuration.
"""
from __future__ import annotations
import os
from tempfile import gettempdir

from flask import Flask
from flask_session import Session
from werkzeug.middleware.proxy_fix import ProxyFix

from directorio.api.helpers.request_data import DATABASE_EXTENSION_KEY
from directorio.config import load_settings
from directorio.config.log_setup import configure_logging
from directorio.core.db import Database


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> Flask:
    """Create and configure Flask application."""
    # Load configuration
    cfg = load_settings()
    configure_logging(cfg.log_level)

    # Create Flask app
    app = Flask(__name__)

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["DEMO_MODE"] = cfg.demo_mode

    # Responses keep the PascalCase field order of the envelope
    app.json.sort_keys = False
    app.json.ensure_ascii = False

    # Flask session configuration
    app.config["SECRET_KEY"] = cfg.secret_key
    if cfg.secret_key_fallbacks:
        app.config["SECRET_KEY_FALLBACKS"] = cfg.secret_key_fallbacks

    app.config["SESSION_TYPE"] = os.environ.get("FLASK_SESSION_TYPE", "filesystem")
    if app.config["SESSION_TYPE"] == "filesystem":
        session_dir = os.environ.get("FLASK_SESSION_DIR") or os.path.join(gettempdir(), "directorio_flask_session")
        os.makedirs(session_dir, exist_ok=True)
        app.config["SESSION_FILE_DIR"] = session_dir

    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_SECURE"] = cfg.session_cookie_secure

    # Initialize session
    Session(app)

    # Trust X-Forwarded-Proto/Host from proxy (nginx); the client IP is
    # resolved from the forwarding headers by the context enricher
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=0, x_proto=1, x_host=1)  # type: ignore

    # Database handle (engine is created on first use)
    app.extensions[DATABASE_EXTENSION_KEY] = Database(
        cfg.database_url,
        pool_size=cfg.db_pool_size,
        pool_recycle=cfg.db_pool_recycle,
    )

    # Register blueprints
    from directorio.api import health, errors
    from directorio.api import login
    from directorio.api import usuario
    from directorio.api import docs as docs_routes

    app.register_blueprint(login.bp)
    app.register_blueprint(usuario.bp)
    app.register_blueprint(health.bp)
    app.register_blueprint(docs_routes.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Log startup info
    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    print(f"[flask_app] Mode={mode_label}")
    print("[flask_app] Directory API registered at /Login and /Usuario")

    if cfg.demo_mode:
        print("[flask_app] WARNING: Demo mode active - do not deploy with demo credentials")

    return app


# ─────────────────────────────────────────────────────────────────────────────
# Application Instance (for Gunicorn)
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
