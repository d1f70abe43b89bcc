"""Login endpoints.

Architecture:
    POST /Login/ValidarCredenciales -> login_service.authenticate -> sp_LoginUsuario

Credentials are validated by the stored procedure alone; on success the
user id is kept in the server-side session so later /Usuario writes are
attributed to that user.
"""
from __future__ import annotations
import logging

from flask import Blueprint

from directorio.api.helpers.request_data import (
    envelope_response,
    get_config,
    get_database,
    request_payload,
    transport_info,
)
from directorio.core import identity
from directorio.core.envelope import ApiResponse
from directorio.core.login_service import authenticate
from directorio.core.models import LoginRequest

bp = Blueprint("login", __name__, url_prefix="/Login")

logger = logging.getLogger(__name__)

LOGOUT_MESSAGE = "Sesión cerrada"


@bp.route("/ValidarCredenciales", methods=["POST"])
def validar_credenciales():
    """Validate credentials and enrich the attempt with client context.

    Returns:
        200 with the envelope; ``Exito`` carries the outcome
    """
    cfg = get_config()
    login_request = LoginRequest.from_payload(request_payload())

    resp = authenticate(
        get_database(),
        login_request,
        transport_info(),
        procedure=cfg.login_procedure,
    )

    # A failed attempt must not keep attributing writes to an earlier login
    identity.forget_login()
    if resp.success:
        identity.remember_login(resp.payload)

    return envelope_response(resp)


@bp.route("/CerrarSesion", methods=["POST"])
def cerrar_sesion():
    """Forget the logged-in user."""
    if identity.is_authenticated():
        logger.info(f"Logout for '{identity.current_username()}'")
    identity.forget_login()
    return envelope_response(ApiResponse.ok(None, LOGOUT_MESSAGE))
