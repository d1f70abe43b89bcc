"""Gunicorn configuration file.

Run with:
    gunicorn -c gunicorn.conf.py directorio.flask_app:app

Secrets (flask_secret_key, database_url) are read by directorio/config/settings.py
from /run/secrets when mounted, otherwise from the environment.
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "60"))
accesslog = "-"


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Pooled database connections opened in the master (for example by a
    preloaded app) must never be shared across processes, so the worker
    drops them and opens its own on first use.
    """
    from pathlib import Path

    secrets_dir = Path("/run/secrets")
    if secrets_dir.exists() and secrets_dir.is_dir():
        secret_files = list(secrets_dir.glob("*"))
        if secret_files:
            worker.log.info(f"Found {len(secret_files)} secrets in /run/secrets")

    app = getattr(worker, "app", None)
    wsgi = getattr(app, "callable", None) if app is not None else None
    database = getattr(wsgi, "extensions", {}).get("directorio.database") if wsgi is not None else None
    if database is None:
        return

    database.dispose()
    worker.log.info("Disposed inherited database pool")
