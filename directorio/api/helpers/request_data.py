"""
Request helpers shared by the /Login and /Usuario blueprints.

Collects the caller payload from the query string, form fields and JSON body,
captures the transport state used by the client context enricher, and gives
views access to the application's database handle and configuration.
"""
from __future__ import annotations
from typing import Any

from flask import current_app, jsonify, request

from directorio.core.context import TransportInfo
from directorio.core.db import Database
from directorio.core.envelope import ApiResponse

DATABASE_EXTENSION_KEY = "directorio.database"


def get_database() -> Database:
    """Database handle created by the application factory."""
    return current_app.extensions[DATABASE_EXTENSION_KEY]


def get_config():
    """AppConfig stored by the application factory."""
    return current_app.config["APP_CONFIG"]


def request_payload() -> dict[str, Any]:
    """Merge query args, form fields and a JSON object body (later sources win).

    Field names are matched case-insensitively downstream, so the raw keys are
    kept as sent.
    """
    payload: dict[str, Any] = dict(request.args.items())
    payload.update(request.form.items())

    body = request.get_json(silent=True)
    if isinstance(body, dict):
        payload.update(body)

    return payload


def transport_info() -> TransportInfo:
    """Snapshot of the headers and peer addresses of the current request."""
    return TransportInfo(
        headers=dict(request.headers.items()),
        peer_address=request.remote_addr,
        remote_addr=request.environ.get("REMOTE_ADDR"),
        user_agent=request.headers.get("User-Agent"),
    )


def envelope_response(resp: ApiResponse):
    """Render an envelope; business endpoints always answer HTTP 200."""
    return jsonify(resp.to_dict()), 200
