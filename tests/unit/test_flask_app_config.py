import pytest

from directorio.api.helpers.request_data import DATABASE_EXTENSION_KEY
from directorio.core.db import Database
from directorio.flask_app import create_app


@pytest.fixture()
def demo_env(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("FLASK_SESSION_COOKIE_SECURE", "true")
    monkeypatch.setenv("DB_POOL_SIZE", "7")


@pytest.fixture()
def app(demo_env):
    return create_app()


def test_session_cookie_flags(app):
    assert app.config["SESSION_COOKIE_HTTPONLY"] is True
    assert app.config["SESSION_COOKIE_SAMESITE"] == "Lax"
    assert app.config["SESSION_COOKIE_SECURE"] is True


def test_database_handle_is_lazy(app):
    database = app.extensions[DATABASE_EXTENSION_KEY]
    assert isinstance(database, Database)
    assert database._engine is None
    assert database._engine_options["pool_size"] == 7


def test_blueprints_registered(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}
    assert {
        "/Login/ValidarCredenciales",
        "/Login/CerrarSesion",
        "/Usuario/Listar",
        "/Usuario/Obtener",
        "/Usuario/Crear",
        "/Usuario/Actualizar",
        "/Usuario/Eliminar",
        "/Usuario/CambiarPassword",
        "/health",
        "/ready",
        "/openapi.json",
    } <= rules


def test_forwarded_for_is_not_applied_to_remote_addr(app):
    seen = {}

    @app.route("/_remote")
    def _remote():
        from flask import request
        seen["remote"] = request.remote_addr
        return "ok"

    with app.test_client() as client:
        client.get("/_remote", headers={"X-Forwarded-For": "10.0.0.5"}, environ_base={"REMOTE_ADDR": "172.17.0.1"})

    assert seen["remote"] == "172.17.0.1"
