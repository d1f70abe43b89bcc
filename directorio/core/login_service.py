"""Credential validation through the login stored procedure."""
from __future__ import annotations
import logging

from .context import (
    AGENT_FIELD_MAX_LENGTH,
    IP_MAX_LENGTH,
    USER_AGENT_MAX_LENGTH,
    ClientContext,
    TransportInfo,
    enrich_context,
)
from .envelope import ApiResponse, exception_message
from .models import LoginRequest, LoginResult
from .procedures import (
    ProcParam,
    execute_procedure,
    first_row,
    is_bare_error_row,
    status_message,
)

logger = logging.getLogger(__name__)

DEFAULT_LOGIN_PROCEDURE = "sp_LoginUsuario"

CREDENTIAL_MAX_LENGTH = 100

LOGIN_OK_MESSAGE = "Login exitoso"
NO_RESPONSE_MESSAGE = "No se obtuvo respuesta del procedimiento."


def build_login_params(request: LoginRequest, context: ClientContext) -> list[ProcParam]:
    """Bind the seven fixed-width login parameters in procedure order."""
    return [
        ProcParam("@Usuario", request.usuario or "", CREDENTIAL_MAX_LENGTH),
        ProcParam("@Password", request.password or "", CREDENTIAL_MAX_LENGTH),
        ProcParam("@DireccionIp", context.ip, IP_MAX_LENGTH),
        ProcParam("@UserAgent", context.user_agent, USER_AGENT_MAX_LENGTH),
        ProcParam("@SistemaOperativo", context.os, AGENT_FIELD_MAX_LENGTH),
        ProcParam("@Dispositivo", context.device, AGENT_FIELD_MAX_LENGTH),
        ProcParam("@Browser", context.browser, AGENT_FIELD_MAX_LENGTH),
    ]


def authenticate(
    db,
    request: LoginRequest,
    transport: TransportInfo,
    procedure: str = DEFAULT_LOGIN_PROCEDURE,
) -> ApiResponse[LoginResult]:
    """Validate credentials and classify the procedure's single result row.

    Args:
        db: Database handle
        request: Credentials plus optional caller-declared client context
        transport: Transport state used to fill blank context fields
        procedure: Login procedure name

    Returns:
        Failure envelope carrying the procedure's message for a bare
        ``Resultado``/``Mensaje`` row, success envelope with the user data
        for any other row. Never raises.
    """
    resp: ApiResponse[LoginResult] = ApiResponse.fail("Error inesperado.")

    try:
        context = enrich_context(
            transport,
            ip=request.ip,
            user_agent=request.user_agent,
            os=request.sistema_operativo,
            device=request.dispositivo,
            browser=request.browser,
        )
        if request.debug:
            resp.debug = context

        result_sets = execute_procedure(db, procedure, build_login_params(request, context))
        row = first_row(result_sets)

        if row is None:
            resp.success = False
            resp.message = NO_RESPONSE_MESSAGE
        elif is_bare_error_row(row):
            resp.success = False
            resp.message = status_message(row)
            logger.info(f"Login rejected for '{request.usuario}' from {context.ip}")
        else:
            resp.success = True
            resp.message = LOGIN_OK_MESSAGE
            resp.payload = LoginResult.from_row(row)
            logger.info(f"Login succeeded for '{request.usuario}' from {context.ip}")
    except Exception as e:
        logger.exception(f"Login call failed for '{request.usuario}'")
        resp.success = False
        resp.message = exception_message(e)
        resp.payload = None

    return resp
