"""User directory operations backed by the multi-action CRUD procedure.

Every action calls the same procedure with the same ordered parameter
contract; ``@Accion`` selects the behavior and parameters an action does not
use are sent as NULL.

Architecture:
    /Usuario/* (Flask) ──> UsuarioService ──> execute_procedure ──> dbo.sp_Usuario_CRUD

Result shapes for write actions:
    - status row (``Resultado`` + ``Mensaje``), optionally followed by a
      record result set
    - record row returned directly (implicit success)
    - nothing at all (permissive success unless strict confirmation is on)
"""
from __future__ import annotations
import logging
from typing import Any, Optional

from .envelope import ApiResponse, PagedResult
from .models import (
    ChangePasswordRequest,
    UserCreateRequest,
    UserDeleteRequest,
    UserListRequest,
    UserRecord,
    UserUpdateRequest,
    UserWriteRequest,
)
from .procedures import (
    ProcParam,
    RecordRow,
    StatusRow,
    classify_status,
    execute_procedure,
    first_row,
    read_int,
)
from .validators import decode_photo, is_blank

logger = logging.getLogger(__name__)

DEFAULT_USUARIO_PROCEDURE = "dbo.sp_Usuario_CRUD"

SYSTEM_USER = "system"

ACTION_LIST = "LISTAR"
ACTION_GET = "OBTENER"
ACTION_CREATE = "CREAR"
ACTION_UPDATE = "ACTUALIZAR"
ACTION_DELETE = "ELIMINAR"
ACTION_CHANGE_PASSWORD = "CAMBIAR_PASSWORD"

MSG_OK = "OK"
MSG_NOT_FOUND = "No encontrado"
MSG_CREATED = "Creado"
MSG_UPDATED = "Actualizado"
MSG_DELETED = "Eliminado"
MSG_PASSWORD_CHANGED = "Password actualizado"
MSG_MISSING_USER_ID = "Debe indicar el IdUsuario."
MSG_NO_RESPONSE = "No se obtuvo respuesta del procedimiento."

# (name, VARCHAR width or None) in the order the procedure declares them
USUARIO_PARAMETERS: tuple[tuple[str, Optional[int]], ...] = (
    ("@Accion", 20),
    ("@IdUsuario", 100),
    ("@Nombre", 100),
    ("@Apellido", 100),
    ("@FechaNacimiento", None),
    ("@IdStatusUsuario", None),
    ("@Password", 100),
    ("@IdGenero", None),
    ("@CorreoElectronico", 100),
    ("@TelefonoMovil", 30),
    ("@IdSucursal", None),
    ("@Pregunta", 200),
    ("@Respuesta", 200),
    ("@IdRole", None),
    ("@Fotografia", None),
    ("@LimpiarFoto", None),
    ("@HardDelete", None),
    ("@PasswordActual", 100),
    ("@PasswordNueva", 100),
    ("@Buscar", 100),
    ("@Pagina", None),
    ("@TamanoPagina", None),
    ("@UsuarioAccion", 100),
)

_KNOWN_PARAMETERS = {name for name, _ in USUARIO_PARAMETERS}


def build_usuario_params(action: str, **values: Any) -> list[ProcParam]:
    """Bind the full parameter contract for one action.

    Args:
        action: ``@Accion`` discriminator
        **values: Parameter values keyed by name without the ``@`` prefix

    Returns:
        Every contract parameter in order; those not given are NULL.

    Raises:
        ValueError: If a value names a parameter outside the contract
    """
    unknown = {f"@{key}" for key in values} - _KNOWN_PARAMETERS
    if unknown:
        raise ValueError(f"Unknown procedure parameters: {', '.join(sorted(unknown))}")

    bound = {f"@{key}": value for key, value in values.items()}
    bound["@Accion"] = action
    return [ProcParam(name, bound.get(name), width) for name, width in USUARIO_PARAMETERS]


def _write_values(request: UserWriteRequest) -> dict:
    return dict(
        IdUsuario=request.user_id,
        Nombre=request.name,
        Apellido=request.surname,
        FechaNacimiento=request.birth_date,
        IdStatusUsuario=request.status_id,
        Password=request.password,
        IdGenero=request.gender_id,
        CorreoElectronico=request.email,
        TelefonoMovil=request.mobile_phone,
        IdSucursal=request.branch_id,
        Pregunta=request.security_question,
        Respuesta=request.security_answer,
        IdRole=request.role_id,
        Fotografia=decode_photo(request.photo_base64),
    )


class UsuarioService:
    """Service for the user directory procedure."""

    def __init__(self, db, procedure: str = DEFAULT_USUARIO_PROCEDURE, strict_write_confirmation: bool = False):
        """Initialize user directory service.

        Args:
            db: Database handle
            procedure: Multi-action CRUD procedure name
            strict_write_confirmation: Treat a write that returns no row at
                all as a failure instead of an implicit success
        """
        self.db = db
        self.procedure = procedure
        self.strict_write_confirmation = strict_write_confirmation

    def _call(self, action: str, **values: Any):
        logger.info(f"{self.procedure} @Accion={action} IdUsuario={values.get('IdUsuario')!r}")
        return execute_procedure(self.db, self.procedure, build_usuario_params(action, **values))

    def _failure(self, action: str, error: Exception) -> ApiResponse:
        logger.exception(f"{self.procedure} @Accion={action} failed")
        return ApiResponse.from_exception(error)

    # ─────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────
    def list_users(self, request: UserListRequest) -> ApiResponse[PagedResult[UserRecord]]:
        """Return one page of users and the full match count.

        An empty page is a valid result, not an error.
        """
        try:
            result_sets = self._call(
                ACTION_LIST,
                Buscar=request.search,
                Pagina=request.page,
                TamanoPagina=request.page_size,
            )
            items = [UserRecord.from_row(row) for row in result_sets[0].rows] if result_sets else []

            total_row = first_row(result_sets, 1)
            total = (read_int(total_row, "Total") or 0) if total_row is not None else 0

            return ApiResponse.ok(PagedResult(items=items, total=total), MSG_OK)
        except Exception as e:
            return self._failure(ACTION_LIST, e)

    def get_user(self, user_id: Optional[str]) -> ApiResponse[UserRecord]:
        """Look up a single user by id."""
        if is_blank(user_id):
            return ApiResponse.fail(MSG_MISSING_USER_ID)

        try:
            row = first_row(self._call(ACTION_GET, IdUsuario=user_id))
            if row is None:
                return ApiResponse.fail(MSG_NOT_FOUND)
            return ApiResponse.ok(UserRecord.from_row(row), MSG_OK)
        except Exception as e:
            return self._failure(ACTION_GET, e)

    # ─────────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────────
    def _interpret_write(self, action: str, result_sets, default_message: str, read_record: bool) -> ApiResponse:
        outcome = classify_status(result_sets, read_record=read_record)

        if isinstance(outcome, StatusRow):
            if not outcome.ok:
                return ApiResponse.fail(outcome.message)
            record = UserRecord.from_row(outcome.record) if outcome.record is not None else None
            return ApiResponse.ok(record, outcome.message)

        if isinstance(outcome, RecordRow):
            record = UserRecord.from_row(outcome.row) if read_record else None
            return ApiResponse.ok(record, default_message)

        # No row at all: the procedure gave no confirmation
        logger.warning(f"{self.procedure} @Accion={action} returned no rows")
        if self.strict_write_confirmation:
            return ApiResponse.fail(MSG_NO_RESPONSE)
        return ApiResponse.ok(None, default_message)

    def create_user(self, request: UserCreateRequest, acting_user: Optional[str]) -> ApiResponse[UserRecord]:
        """Create a user; password hashing and uniqueness are the procedure's job."""
        if is_blank(request.user_id):
            return ApiResponse.fail(MSG_MISSING_USER_ID)

        try:
            result_sets = self._call(
                ACTION_CREATE,
                UsuarioAccion=acting_user or SYSTEM_USER,
                **_write_values(request),
            )
            return self._interpret_write(ACTION_CREATE, result_sets, MSG_CREATED, read_record=True)
        except Exception as e:
            return self._failure(ACTION_CREATE, e)

    def update_user(self, request: UserUpdateRequest, acting_user: Optional[str]) -> ApiResponse[UserRecord]:
        """Update a user; ``clear_photo`` removes the stored photograph."""
        if is_blank(request.user_id):
            return ApiResponse.fail(MSG_MISSING_USER_ID)

        try:
            result_sets = self._call(
                ACTION_UPDATE,
                LimpiarFoto=request.clear_photo,
                UsuarioAccion=acting_user or SYSTEM_USER,
                **_write_values(request),
            )
            return self._interpret_write(ACTION_UPDATE, result_sets, MSG_UPDATED, read_record=True)
        except Exception as e:
            return self._failure(ACTION_UPDATE, e)

    def delete_user(self, request: UserDeleteRequest, acting_user: Optional[str]) -> ApiResponse[Any]:
        """Soft or hard delete, as decided by the procedure."""
        if is_blank(request.user_id):
            return ApiResponse.fail(MSG_MISSING_USER_ID)

        try:
            result_sets = self._call(
                ACTION_DELETE,
                IdUsuario=request.user_id,
                HardDelete=request.hard_delete,
                UsuarioAccion=acting_user or SYSTEM_USER,
            )
            return self._interpret_write(ACTION_DELETE, result_sets, MSG_DELETED, read_record=False)
        except Exception as e:
            return self._failure(ACTION_DELETE, e)

    def change_password(self, request: ChangePasswordRequest, acting_user: Optional[str]) -> ApiResponse[Any]:
        """Change a password; the procedure alone verifies the current one."""
        if is_blank(request.user_id):
            return ApiResponse.fail(MSG_MISSING_USER_ID)

        try:
            result_sets = self._call(
                ACTION_CHANGE_PASSWORD,
                IdUsuario=request.user_id,
                PasswordActual=request.current_password,
                PasswordNueva=request.new_password,
                UsuarioAccion=acting_user or SYSTEM_USER,
            )
            return self._interpret_write(ACTION_CHANGE_PASSWORD, result_sets, MSG_PASSWORD_CHANGED, read_record=False)
        except Exception as e:
            return self._failure(ACTION_CHANGE_PASSWORD, e)
