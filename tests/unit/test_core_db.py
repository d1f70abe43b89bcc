"""Tests for the lazily created database handle."""
import pytest

from directorio.core.db import Database
from directorio.core.exceptions import ConfigurationError


def test_engine_is_not_created_on_construction():
    db = Database("mssql+pymssql://app:pw@db.invalid/ProyectoAnalisis")
    assert db._engine is None


def test_missing_url_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        Database("").engine


def test_ping_and_paramstyle_with_sqlite():
    db = Database("sqlite://")
    try:
        assert db.ping() is True
        assert db.paramstyle == "qmark"
    finally:
        db.dispose()


def test_ping_failure_returns_false():
    db = Database("")
    assert db.ping() is False
