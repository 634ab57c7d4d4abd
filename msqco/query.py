"""Statement outcomes returned by connections to the statement loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, AsyncIterator, Sequence


class CellKind(str, Enum):
    NULL = "null"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    BINARY = "binary"


@dataclass(frozen=True, slots=True)
class Cell:
    """A single nullable value from a result row."""

    kind: CellKind
    value: Any = None

    @classmethod
    def from_driver(cls, value: Any) -> Cell:
        """Classify a raw driver value."""

        if value is None:
            return cls(CellKind.NULL)
        # bool is an int subclass, so it has to be checked first.
        if isinstance(value, bool):
            return cls(CellKind.BOOLEAN, value)
        if isinstance(value, (int, float, Decimal)):
            return cls(CellKind.NUMBER, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(CellKind.BINARY, bytes(value))
        return cls(CellKind.TEXT, str(value))

    def render(self) -> str:
        if self.kind is CellKind.NULL:
            return ""
        if self.kind is CellKind.BINARY:
            return "0x" + self.value.hex()
        return str(self.value)


Row = tuple[Cell, ...]


@dataclass(frozen=True, slots=True)
class StatementError:
    """A statement the server rejected; reported and logged, never raised."""

    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> StatementError:
        text = str(exc).strip() or exc.__class__.__name__
        return cls(text)


@dataclass(frozen=True, slots=True)
class RowCount:
    """Outcome of a statement that does not return rows."""

    affected: int


@dataclass(slots=True)
class QueryStream:
    """Column names plus a lazily consumed row iterator.

    A failure while fetching ends iteration early and is kept in ``error``;
    callers check it once the rows are exhausted.
    """

    columns: tuple[str, ...]
    _source: AsyncIterator[Sequence[Any]]
    error: StatementError | None = field(default=None)

    async def rows(self) -> AsyncIterator[Row]:
        try:
            async for raw in self._source:
                yield tuple(Cell.from_driver(value) for value in raw)
        except Exception as exc:
            self.error = StatementError.from_exception(exc)


StatementOutcome = QueryStream | RowCount | StatementError


def is_query(statement: str) -> bool:
    """Statements starting with SELECT stream rows; everything else reports a count."""

    return statement.lstrip().lower().startswith("select")


__all__ = [
    "Cell",
    "CellKind",
    "QueryStream",
    "Row",
    "RowCount",
    "StatementError",
    "StatementOutcome",
    "is_query",
]
