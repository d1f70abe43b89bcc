"""Transient request/response DTOs.

Attribute names are Python-style; ``from_payload`` reads the PascalCase field
names existing clients send (case-insensitively) and ``to_dict`` writes the
same names back.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from .procedures import read_datetime, read_int, read_text
from .validators import as_bool, as_date, as_int, as_text


@dataclass
class LoginRequest:
    usuario: Optional[str] = None
    password: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    sistema_operativo: Optional[str] = None
    dispositivo: Optional[str] = None
    browser: Optional[str] = None
    debug: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "LoginRequest":
        return cls(
            usuario=as_text(payload, "Usuario"),
            password=as_text(payload, "Password"),
            ip=as_text(payload, "Ip"),
            user_agent=as_text(payload, "UserAgent"),
            sistema_operativo=as_text(payload, "SistemaOperativo"),
            dispositivo=as_text(payload, "Dispositivo"),
            browser=as_text(payload, "Browser"),
            debug=as_bool(payload, "Debug"),
        )

    def __repr__(self) -> str:
        # Never expose the password in logs or tracebacks
        return f"LoginRequest(usuario={self.usuario!r}, debug={self.debug!r})"


@dataclass
class LoginResult:
    """Authenticated user data returned by the login procedure."""
    user_id: Optional[str] = None
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    session: Optional[str] = None
    branch_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LoginResult":
        return cls(
            user_id=read_text(row, "IdUsuario"),
            name=read_text(row, "Nombre"),
            surname=read_text(row, "Apellido"),
            email=read_text(row, "CorreoElectronico"),
            session=read_text(row, "SesionActual"),
            branch_id=read_text(row, "IdSucursal"),
        )

    def to_dict(self) -> dict:
        return {
            "IdUsuario": self.user_id,
            "Nombre": self.name,
            "Apellido": self.surname,
            "CorreoElectronico": self.email,
            "Sesion": self.session,
            "IdSucursal": self.branch_id,
        }


@dataclass
class UserRecord:
    user_id: Optional[str] = None
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    branch_id: Optional[int] = None
    status_id: Optional[int] = None
    role_id: Optional[int] = None
    mobile_phone: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "UserRecord":
        """Map a result row; columns the procedure omitted stay ``None``."""
        return cls(
            user_id=read_text(row, "IdUsuario"),
            name=read_text(row, "Nombre"),
            surname=read_text(row, "Apellido"),
            email=read_text(row, "CorreoElectronico"),
            branch_id=read_int(row, "IdSucursal"),
            status_id=read_int(row, "IdStatusUsuario"),
            role_id=read_int(row, "IdRole"),
            mobile_phone=read_text(row, "TelefonoMovil"),
            created_at=read_datetime(row, "FechaCreacion"),
        )

    def to_dict(self) -> dict:
        return {
            "IdUsuario": self.user_id,
            "Nombre": self.name,
            "Apellido": self.surname,
            "CorreoElectronico": self.email,
            "IdSucursal": self.branch_id,
            "IdStatusUsuario": self.status_id,
            "IdRole": self.role_id,
            "TelefonoMovil": self.mobile_phone,
            "FechaCreacion": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class UserWriteRequest:
    """Fields shared by create and update requests."""
    user_id: Optional[str] = None
    name: Optional[str] = None
    surname: Optional[str] = None
    birth_date: Optional[date] = None
    status_id: Optional[int] = None
    password: Optional[str] = None
    gender_id: Optional[int] = None
    email: Optional[str] = None
    mobile_phone: Optional[str] = None
    branch_id: Optional[int] = None
    security_question: Optional[str] = None
    security_answer: Optional[str] = None
    role_id: Optional[int] = None
    photo_base64: Optional[str] = None

    @classmethod
    def _fields_from_payload(cls, payload: Mapping[str, Any], default_status: Optional[int]) -> dict:
        return dict(
            user_id=as_text(payload, "IdUsuario"),
            name=as_text(payload, "Nombre"),
            surname=as_text(payload, "Apellido"),
            birth_date=as_date(payload, "FechaNacimiento"),
            status_id=as_int(payload, "IdStatusUsuario", default=default_status),
            password=as_text(payload, "Password"),
            gender_id=as_int(payload, "IdGenero"),
            email=as_text(payload, "CorreoElectronico"),
            mobile_phone=as_text(payload, "TelefonoMovil"),
            branch_id=as_int(payload, "IdSucursal"),
            security_question=as_text(payload, "Pregunta"),
            security_answer=as_text(payload, "Respuesta"),
            role_id=as_int(payload, "IdRole"),
            photo_base64=as_text(payload, "FotografiaBase64"),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(user_id={self.user_id!r})"


@dataclass(repr=False)
class UserCreateRequest(UserWriteRequest):
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserCreateRequest":
        # New users are active unless the caller says otherwise
        return cls(**cls._fields_from_payload(payload, default_status=1))


@dataclass(repr=False)
class UserUpdateRequest(UserWriteRequest):
    clear_photo: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserUpdateRequest":
        return cls(
            **cls._fields_from_payload(payload, default_status=None),
            clear_photo=as_bool(payload, "LimpiarFoto"),
        )


@dataclass
class UserListRequest:
    search: Optional[str] = None
    page: int = 1
    page_size: int = 10

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserListRequest":
        return cls(
            search=as_text(payload, "Buscar"),
            page=as_int(payload, "Pagina", default=1),
            page_size=as_int(payload, "TamanoPagina", default=10),
        )


@dataclass
class UserDeleteRequest:
    user_id: Optional[str] = None
    hard_delete: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserDeleteRequest":
        return cls(
            user_id=as_text(payload, "IdUsuario"),
            hard_delete=as_bool(payload, "HardDelete"),
        )


@dataclass
class ChangePasswordRequest:
    user_id: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ChangePasswordRequest":
        return cls(
            user_id=as_text(payload, "IdUsuario"),
            current_password=as_text(payload, "PasswordActual"),
            new_password=as_text(payload, "PasswordNueva"),
        )

    def __repr__(self) -> str:
        return f"ChangePasswordRequest(user_id={self.user_id!r})"
