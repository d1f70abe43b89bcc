"""Pytest shared fixtures: fake DBAPI driver and Flask test client."""
import os
import pathlib
import sys
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
# Demo mode generates a temporary secret key and a local database URL
os.environ.setdefault("DEMO_MODE", "true")
os.environ.setdefault("FLASK_SESSION_COOKIE_SECURE", "false")

import pytest

from directorio.api.helpers.request_data import DATABASE_EXTENSION_KEY
from directorio.flask_app import create_app


# ─────────────────────────────────────────────────────────────────────────────
# Fake DBAPI
# ─────────────────────────────────────────────────────────────────────────────
class FakeCursor:
    """DBAPI cursor replaying scripted result sets.

    Each result set is ``(columns, rows)``; ``None`` stands for a statement
    without a description (e.g. a row count).
    """

    def __init__(self, connection: "FakeConnection"):
        self.connection = connection
        self._sets = list(connection.result_sets)
        self._position = 0
        self.closed = False

    @property
    def description(self):
        if self._position >= len(self._sets) or self._sets[self._position] is None:
            return None
        columns, _ = self._sets[self._position]
        return [(name, None, None, None, None, None, None) for name in columns]

    def execute(self, statement, params=()):
        self.connection.executed.append((statement, tuple(params)))
        if self.connection.error is not None:
            raise self.connection.error

    def fetchall(self):
        _, rows = self._sets[self._position]
        return [tuple(row) for row in rows]

    def nextset(self):
        self._position += 1
        return True if self._position < len(self._sets) else None

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, result_sets, error: Optional[Exception] = None):
        self.result_sets = result_sets
        self.error = error
        self.executed = []
        self.cursors = []
        self.committed = False
        self.closed = False

    def cursor(self):
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def commit(self):
        self.committed = True

    def close(self):
        self.closed = True


class FakeDatabase:
    """Stand-in for ``directorio.core.db.Database``.

    Usage:
        db = FakeDatabase()
        db.script([(["Resultado", "Mensaje"], [(0, "Usuario bloqueado")])])
    """

    paramstyle = "pyformat"

    def __init__(self):
        self.connections = []
        self._result_sets = []
        self._error = None
        self.healthy = True

    def script(self, result_sets=None, error: Optional[Exception] = None):
        self._result_sets = list(result_sets or [])
        self._error = error
        return self

    def raw_connection(self):
        connection = FakeConnection(self._result_sets, self._error)
        self.connections.append(connection)
        return connection

    def ping(self) -> bool:
        return self.healthy

    def dispose(self):
        pass

    # Inspection helpers
    @property
    def last_connection(self) -> FakeConnection:
        return self.connections[-1]

    @property
    def last_statement(self) -> str:
        return self.last_connection.executed[-1][0]

    @property
    def last_params(self) -> tuple:
        return self.last_connection.executed[-1][1]


@pytest.fixture()
def fake_db():
    """Empty scripted database."""
    return FakeDatabase()


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def flask_app(fake_db):
    """Application wired to the fake database."""
    app = create_app()
    app.config.update(TESTING=True)
    app.extensions[DATABASE_EXTENSION_KEY] = fake_db
    return app


@pytest.fixture()
def client(flask_app):
    """Flask test client backed by the fake database."""
    with flask_app.test_client() as client:
        with flask_app.app_context():
            yield client


def login_as(client, username: str = "admin"):
    """Store a logged-in user in the test client's session."""
    with client.session_transaction() as session:
        session["usuario"] = username
        session["sesion"] = "token-123"
        session["id_sucursal"] = "1"


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a reachable SQL Server)"
    )
