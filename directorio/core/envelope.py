"""Uniform response envelope shared by every endpoint."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

from .exceptions import ProcedureError

T = TypeVar("T")

EXCEPTION_PREFIX = "Excepción: "


def exception_message(error: BaseException) -> str:
    """Client-facing text for an infrastructure failure.

    Procedure failures carry only the driver message; the procedure name
    stays in the logs.
    """
    detail = error.message if isinstance(error, ProcedureError) else error
    return f"{EXCEPTION_PREFIX}{detail}"


def _serialize(value: Any) -> Any:
    if value is None:
        return None
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    return value


@dataclass
class PagedResult(Generic[T]):
    """One page of items plus the size of the full matching set."""
    items: List[T] = field(default_factory=list)
    total: int = 0

    def to_dict(self) -> dict:
        return {"Items": _serialize(self.items), "Total": self.total}


@dataclass
class ApiResponse(Generic[T]):
    """``{Exito, Mensaje, Datos, Debug}`` wrapper.

    All four keys are always serialized; unset payload and debug render as
    ``null``.
    """
    success: bool = False
    message: str = "Error inesperado."
    payload: Optional[T] = None
    debug: Optional[Any] = None

    @classmethod
    def ok(cls, payload: Optional[T] = None, message: str = "OK", debug: Any = None) -> "ApiResponse[T]":
        return cls(success=True, message=message, payload=payload, debug=debug)

    @classmethod
    def fail(cls, message: str, debug: Any = None) -> "ApiResponse[T]":
        return cls(success=False, message=message, payload=None, debug=debug)

    @classmethod
    def from_exception(cls, error: BaseException, debug: Any = None) -> "ApiResponse[T]":
        return cls.fail(exception_message(error), debug=debug)

    def to_dict(self) -> dict:
        return {
            "Exito": self.success,
            "Mensaje": self.message,
            "Datos": _serialize(self.payload),
            "Debug": _serialize(self.debug),
        }
