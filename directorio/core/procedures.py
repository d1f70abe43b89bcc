"""Stored-procedure invocation and result-set classification.

Every call opens one pooled DBAPI connection, executes a single ``EXEC``
batch, captures each result set that carries a column description, commits,
and releases the cursor and connection on every exit path.

Result sets are captured eagerly (callers read at most two small sets), so
shape classification runs afterwards as a pure step over column names:

    result_sets = execute_procedure(db, "dbo.sp_Usuario_CRUD", params)
    outcome = classify_status(result_sets)
    if isinstance(outcome, StatusRow):
        ...
"""
from __future__ import annotations
import logging
import re
from contextlib import closing
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterator, Mapping, Optional, Sequence, Union

from .exceptions import InvalidProcedureNameError, ProcedureError
from .validators import clip_or_none

logger = logging.getLogger(__name__)

PROCEDURE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\[\]]+$")
PARAMETER_NAME_PATTERN = re.compile(r"^@[A-Za-z0-9_]+$")

STATUS_COLUMN = "Resultado"
MESSAGE_COLUMN = "Mensaje"

# DBAPI paramstyles that take positional placeholders
_PLACEHOLDERS = {
    "qmark": "?",
    "format": "%s",
    "pyformat": "%s",
}


# ─────────────────────────────────────────────────────────────────────────────
# Parameters
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ProcParam:
    """One bound procedure parameter.

    ``width`` is the declared VARCHAR size; text values are clipped to it
    before transmission. ``None`` values are sent as SQL NULL.
    """
    name: str
    value: Any = None
    width: Optional[int] = None

    def bound_value(self) -> Any:
        if self.width is not None and isinstance(self.value, str):
            return clip_or_none(self.value, self.width)
        return self.value


def build_exec_statement(procedure: str, params: Sequence[ProcParam], paramstyle: str) -> str:
    """Build ``EXEC <procedure> @A = ?, @B = ?`` for the driver's paramstyle."""
    if not PROCEDURE_NAME_PATTERN.match(procedure or ""):
        raise InvalidProcedureNameError(f"Invalid procedure name: {procedure!r}")
    placeholder = _PLACEHOLDERS.get(paramstyle)
    if placeholder is None:
        raise ProcedureError(procedure, f"Unsupported DBAPI paramstyle: {paramstyle}")

    assignments = []
    for param in params:
        if not PARAMETER_NAME_PATTERN.match(param.name):
            raise ProcedureError(procedure, f"Invalid parameter name: {param.name!r}")
        assignments.append(f"{param.name} = {placeholder}")

    statement = f"SET NOCOUNT ON; EXEC {procedure}"
    if assignments:
        statement += " " + ", ".join(assignments)
    return statement


# ─────────────────────────────────────────────────────────────────────────────
# Result sets
# ─────────────────────────────────────────────────────────────────────────────
class Row(Mapping[str, Any]):
    """Read-only row with case-insensitive, absence-tolerant column lookup."""

    def __init__(self, columns: Sequence[str], values: Sequence[Any]):
        self._columns = list(columns)
        self._values = list(values)
        self._index: dict[str, int] = {}
        for position, name in enumerate(self._columns):
            self._index.setdefault(name.lower(), position)

    def __getitem__(self, column: str) -> Any:
        return self._values[self._index[column.lower()]]

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, column: object) -> bool:
        return isinstance(column, str) and column.lower() in self._index

    def get(self, column: str, default: Any = None) -> Any:
        """Return the column value, ``default`` when the column is absent."""
        position = self._index.get(column.lower())
        if position is None:
            return default
        return self._values[position]

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def column_set(self) -> frozenset[str]:
        """Lower-cased column names."""
        return frozenset(self._index)

    def __repr__(self) -> str:
        return f"Row({dict(zip(self._columns, self._values))!r})"


@dataclass
class ResultSet:
    """Column names plus every row of one result set."""
    columns: list[str]
    rows: list[Row] = field(default_factory=list)

    @property
    def first(self) -> Optional[Row]:
        return self.rows[0] if self.rows else None


def _capture(cursor) -> ResultSet:
    columns = [column[0] for column in cursor.description]
    rows = [Row(columns, values) for values in cursor.fetchall()]
    return ResultSet(columns=columns, rows=rows)


def execute_procedure(db, procedure: str, params: Sequence[ProcParam]) -> list[ResultSet]:
    """Execute a stored procedure and return all of its result sets.

    Args:
        db: Database handle exposing ``raw_connection()`` and ``paramstyle``
        procedure: Procedure name (schema-qualified names allowed)
        params: Ordered parameter contract

    Returns:
        Result sets in the order the procedure produced them. Sets without a
        column description (row counts, messages) are skipped.

    Raises:
        InvalidProcedureNameError: If the procedure name is not a plain identifier
        ProcedureError: On any connection, binding or execution failure
    """
    statement = build_exec_statement(procedure, params, db.paramstyle)
    values = tuple(param.bound_value() for param in params)

    try:
        with closing(db.raw_connection()) as connection:
            with closing(connection.cursor()) as cursor:
                cursor.execute(statement, values)
                result_sets = []
                while True:
                    if cursor.description:
                        result_sets.append(_capture(cursor))
                    if not cursor.nextset():
                        break
            connection.commit()
    except ProcedureError:
        raise
    except Exception as e:
        raise ProcedureError(procedure, str(e)) from e

    logger.debug(f"{procedure} returned {len(result_sets)} result set(s)")
    return result_sets


def first_row(result_sets: Sequence[ResultSet], index: int = 0) -> Optional[Row]:
    """Return the first row of result set ``index``, or ``None``."""
    if index >= len(result_sets):
        return None
    return result_sets[index].first


# ─────────────────────────────────────────────────────────────────────────────
# Column-tolerant readers
# ─────────────────────────────────────────────────────────────────────────────
def read_text(row: Mapping[str, Any], column: str) -> Optional[str]:
    """Column as text; ``None`` when absent or NULL."""
    value = row.get(column)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def read_int(row: Mapping[str, Any], column: str) -> Optional[int]:
    """Column as int; ``None`` when absent or NULL."""
    value = row.get(column)
    if value is None:
        return None
    return int(value)


def read_datetime(row: Mapping[str, Any], column: str) -> Optional[datetime]:
    """Column as datetime; ``None`` when absent or NULL."""
    value = row.get(column)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).strip())


# ─────────────────────────────────────────────────────────────────────────────
# Shape classification
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class StatusRow:
    """``Resultado``/``Mensaje`` row reported by a write action."""
    ok: bool
    message: str
    record: Optional[Row] = None


@dataclass(frozen=True)
class RecordRow:
    """Data row returned directly in place of a status row."""
    row: Row


WriteOutcome = Union[StatusRow, RecordRow]


def has_status_columns(row: Row) -> bool:
    """True when the row carries both ``Resultado`` and ``Mensaje``."""
    return {STATUS_COLUMN.lower(), MESSAGE_COLUMN.lower()} <= row.column_set


def is_bare_error_row(row: Row) -> bool:
    """True when the row has exactly the two columns ``Resultado`` and ``Mensaje``."""
    return row.column_set == {STATUS_COLUMN.lower(), MESSAGE_COLUMN.lower()} and len(row) == 2


def status_message(row: Row) -> str:
    """``Mensaje`` as text, empty string for NULL."""
    return read_text(row, MESSAGE_COLUMN) or ""


def classify_status(result_sets: Sequence[ResultSet], read_record: bool = True) -> Optional[WriteOutcome]:
    """Classify the first row of a write action's output.

    Args:
        result_sets: Captured result sets
        read_record: Whether a status row may be followed by a record set

    Returns:
        ``StatusRow`` (success = Resultado == 1) when the first row has both
        status columns, ``RecordRow`` when it lacks them, ``None`` when the
        procedure returned no row at all.
    """
    row = first_row(result_sets)
    if row is None:
        return None

    if has_status_columns(row):
        record = first_row(result_sets, 1) if read_record else None
        return StatusRow(
            ok=int(row[STATUS_COLUMN]) == 1,
            message=status_message(row),
            record=record,
        )

    return RecordRow(row=row)
