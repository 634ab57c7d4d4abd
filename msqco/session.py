"""Interactive statement loop bound to one open connection."""

from __future__ import annotations

import logging
from enum import Enum

from . import console
from .connections import Connection
from .console import Terminal
from .query import QueryStream, RowCount, StatementError, StatementOutcome
from .transcript import SessionLog

LOG = logging.getLogger(__name__)

EXIT_COMMAND = "exit"
PROMPT = "> "


class SessionStatus(str, Enum):
    CONNECTED = "connected"
    TERMINATED = "terminated"


class SqlSession:
    """Reads statements from the operator and runs them until ``exit``."""

    def __init__(self, connection: Connection, terminal: Terminal, log: SessionLog) -> None:
        self._connection = connection
        self._terminal = terminal
        self._log = log
        self._status = SessionStatus.CONNECTED
        self._executed = 0

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def executed(self) -> int:
        """Number of statements sent to the server so far."""

        return self._executed

    async def run(self) -> int:
        """Drive the loop to termination and return the statement count."""

        self._terminal.emit(console.info(f"Entrez vos commandes SQL (tapez '{EXIT_COMMAND}' pour quitter) :"))
        while self._status is SessionStatus.CONNECTED:
            try:
                line = await self._terminal.ask(PROMPT)
            except (EOFError, KeyboardInterrupt):
                LOG.debug("Input stream closed; treating as exit")
                await self.terminate()
                break
            await self.handle(line)
        return self._executed

    async def handle(self, line: str) -> None:
        """Process one line of operator input."""

        if self._status is SessionStatus.TERMINATED:
            raise RuntimeError("Session already terminated.")
        if not line.strip():
            return
        if line.strip().lower() == EXIT_COMMAND:
            await self.terminate()
            return

        self._log.command(line)
        self._executed += 1
        LOG.debug("Executing statement #%d", self._executed)
        outcome = await self._connection.execute(line)
        if isinstance(outcome, QueryStream):
            outcome = await self._render_rows(outcome)
        self._report(outcome)

    async def terminate(self) -> None:
        if self._status is SessionStatus.TERMINATED:
            return
        self._status = SessionStatus.TERMINATED
        self._log.disconnect()
        try:
            await self._connection.close()
        except Exception:
            LOG.exception("Closing the connection failed")
        self._terminal.emit(console.info("Déconnecté."))

    async def _render_rows(self, stream: QueryStream) -> QueryStream | StatementError:
        self._terminal.emit(console.header(stream.columns))
        async for values in stream.rows():
            self._terminal.emit(console.row(cell.render() for cell in values))
        return stream.error or stream

    def _report(self, outcome: StatementOutcome) -> None:
        if isinstance(outcome, StatementError):
            self._terminal.emit(console.error(f"Erreur SQL : {outcome.message}"))
            self._log.sql_error(outcome.message)
        elif isinstance(outcome, RowCount):
            self._terminal.emit(console.success(f"Commande exécutée, {outcome.affected} ligne(s) affectée(s)."))
            self._log.non_query_ok(outcome.affected)
        else:
            self._log.query_ok()


__all__ = ["EXIT_COMMAND", "SessionStatus", "SqlSession"]
