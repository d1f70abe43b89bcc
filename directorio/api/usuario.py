"""User directory endpoints.

Architecture:
    /Usuario/* (Flask) -> UsuarioService -> dbo.sp_Usuario_CRUD

Every endpoint answers HTTP 200; the envelope's ``Exito`` flag carries the
outcome. Writes are attributed to the user stored in the session by
/Login/ValidarCredenciales, or to ``system`` when nobody logged in.
"""
from __future__ import annotations

from flask import Blueprint

from directorio.api.helpers.request_data import (
    envelope_response,
    get_config,
    get_database,
    request_payload,
)
from directorio.core import identity
from directorio.core.models import (
    ChangePasswordRequest,
    UserCreateRequest,
    UserDeleteRequest,
    UserListRequest,
    UserUpdateRequest,
)
from directorio.core.usuario_service import UsuarioService
from directorio.core.validators import as_text

bp = Blueprint("usuario", __name__, url_prefix="/Usuario")


def _service() -> UsuarioService:
    cfg = get_config()
    return UsuarioService(
        get_database(),
        procedure=cfg.usuario_procedure,
        strict_write_confirmation=cfg.strict_write_confirmation,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Reads
# ─────────────────────────────────────────────────────────────────────────────
@bp.route("/Listar", methods=["GET"])
def listar():
    """Paged search: ``?buscar=&pagina=&tamanoPagina=``."""
    list_request = UserListRequest.from_payload(request_payload())
    return envelope_response(_service().list_users(list_request))


@bp.route("/Obtener", methods=["GET"])
def obtener():
    """Single user by ``?idUsuario=``."""
    user_id = as_text(request_payload(), "IdUsuario")
    return envelope_response(_service().get_user(user_id))


# ─────────────────────────────────────────────────────────────────────────────
# Writes
# ─────────────────────────────────────────────────────────────────────────────
@bp.route("/Crear", methods=["POST"])
def crear():
    create_request = UserCreateRequest.from_payload(request_payload())
    return envelope_response(_service().create_user(create_request, identity.current_username()))


@bp.route("/Actualizar", methods=["POST"])
def actualizar():
    update_request = UserUpdateRequest.from_payload(request_payload())
    return envelope_response(_service().update_user(update_request, identity.current_username()))


@bp.route("/Eliminar", methods=["POST"])
def eliminar():
    """Body ``{idUsuario, hardDelete}``."""
    delete_request = UserDeleteRequest.from_payload(request_payload())
    return envelope_response(_service().delete_user(delete_request, identity.current_username()))


@bp.route("/CambiarPassword", methods=["POST"])
def cambiar_password():
    """Body ``{idUsuario, passwordActual, passwordNueva}``."""
    password_request = ChangePasswordRequest.from_payload(request_payload())
    return envelope_response(_service().change_password(password_request, identity.current_username()))
