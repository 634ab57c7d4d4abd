"""Shared dataclasses used across connection/session modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Dialect(str, Enum):
    """Database flavours the client knows how to open."""

    MYSQL = "mysql"
    POSTGRESQL = "postgresql"

    @property
    def default_port(self) -> int:
        return 5432 if self is Dialect.POSTGRESQL else 3306


@dataclass(frozen=True, slots=True)
class ConnectionDescriptor:
    """Discrete connection parameters resolved from a stored profile."""

    host: str
    port: int
    database: str
    user: str
    password: str
    dialect: Dialect = Dialect.MYSQL


__all__ = ["ConnectionDescriptor", "Dialect"]
