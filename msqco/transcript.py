"""Append-only session transcript."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, TextIO


class LogKind(str, Enum):
    SESSION_START = "session_start"
    CONNECT_SUCCESS = "connect_success"
    CONNECT_FAILURE = "connect_failure"
    COMMAND_ISSUED = "command_issued"
    QUERY_OK = "query_ok"
    NON_QUERY_OK = "non_query_ok"
    SQL_ERROR = "sql_error"
    DISCONNECT = "disconnect"


_TAGS: dict[LogKind, str] = {
    LogKind.CONNECT_SUCCESS: "INFO",
    LogKind.CONNECT_FAILURE: "ERROR",
    LogKind.COMMAND_ISSUED: "COMMAND",
    LogKind.QUERY_OK: "INFO",
    LogKind.NON_QUERY_OK: "INFO",
    LogKind.SQL_ERROR: "ERROR",
    LogKind.DISCONNECT: "INFO",
}


@dataclass(frozen=True, slots=True)
class SessionLogEntry:
    """One transcript line."""

    timestamp: datetime
    kind: LogKind
    detail: str = ""

    def render(self) -> str:
        if self.kind is LogKind.SESSION_START:
            return f"-- Nouvelle session démarrée le {self.timestamp:%Y-%m-%d %H:%M:%S}"
        detail = " ".join(self.detail.splitlines())
        return f"[{_TAGS[self.kind]}] {self.timestamp:%H:%M:%S} {detail}"


class SessionLog:
    """Writes entries to an already opened text stream, one line each."""

    def __init__(self, stream: TextIO, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self._stream = stream
        self._clock = clock

    def record(self, kind: LogKind, detail: str = "") -> SessionLogEntry:
        entry = SessionLogEntry(timestamp=self._clock(), kind=kind, detail=detail)
        self.write(entry)
        return entry

    def write(self, entry: SessionLogEntry) -> None:
        self._stream.write(entry.render() + "\n")
        self._stream.flush()

    def connect_success(self) -> None:
        self.record(LogKind.CONNECT_SUCCESS, "Connexion réussie.")

    def connect_failure(self, message: str) -> None:
        self.record(LogKind.CONNECT_FAILURE, f"Échec connexion : {message}")

    def command(self, text: str) -> None:
        self.record(LogKind.COMMAND_ISSUED, text)

    def query_ok(self) -> None:
        self.record(LogKind.QUERY_OK, "Requête SELECT exécutée.")

    def non_query_ok(self, affected: int) -> None:
        self.record(LogKind.NON_QUERY_OK, f"Non-SELECT exécuté, {affected} ligne(s) affectée(s).")

    def sql_error(self, message: str) -> None:
        self.record(LogKind.SQL_ERROR, f"Erreur SQL : {message}")

    def disconnect(self) -> None:
        self.record(LogKind.DISCONNECT, "Déconnexion.")


@contextmanager
def open_session_log(path: Path, *, clock: Callable[[], datetime] = datetime.now) -> Iterator[SessionLog]:
    """Open the transcript for one run.

    The session marker is written on entry and an empty separator line on
    exit, whichever way the block is left.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as stream:
        log = SessionLog(stream, clock=clock)
        log.record(LogKind.SESSION_START)
        try:
            yield log
        finally:
            stream.write("\n")
            stream.flush()


__all__ = ["LogKind", "SessionLog", "SessionLogEntry", "open_session_log"]
