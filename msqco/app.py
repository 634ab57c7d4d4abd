"""Command-line entry point for msqco."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Sequence

from . import console
from .config import ConfigLoadError, load_or_create, log_path, reset_files
from .connections import DatabaseConnectionError, MalformedConnectionURL, open_connection, resolve
from .console import PromptToolkitTerminal, Terminal
from .session import SqlSession
from .transcript import open_session_log

LOG = logging.getLogger(__name__)

RESET_FLAG = "--reset"
DEBUG_ENV = "MSQCO_DEBUG"

EXIT_OK = 0
EXIT_FAILURE = 1


def reset(terminal: Terminal) -> int:
    """Forget the stored profile and the transcript."""

    reset_files()
    terminal.emit(console.plain("Configuration et journal supprimés."))
    return EXIT_OK


async def run(terminal: Terminal) -> int:
    """Load the profile, connect, and hand control to the statement loop."""

    try:
        profile = await load_or_create(terminal)
    except ConfigLoadError as exc:
        terminal.emit(console.error(str(exc)))
        return EXIT_FAILURE
    except (EOFError, KeyboardInterrupt):
        terminal.emit(console.error("Configuration interrompue."))
        return EXIT_FAILURE
    LOG.debug("Loaded %s profile", profile.mode)

    with open_session_log(log_path()) as log:
        terminal.emit(console.banner())
        try:
            connection = await open_connection(resolve(profile))
        except (MalformedConnectionURL, DatabaseConnectionError) as exc:
            terminal.emit(console.error(f"Erreur de connexion : {exc}"))
            log.connect_failure(str(exc))
            return EXIT_FAILURE

        terminal.emit(console.success("Connecté à la base de données."))
        log.connect_success()
        await SqlSession(connection, terminal, log).run()
    return EXIT_OK


def main(argv: Sequence[str] | None = None, *, terminal: Terminal | None = None) -> int:
    """Invoke the console client."""

    args = list(sys.argv[1:] if argv is None else argv)
    if os.environ.get(DEBUG_ENV):
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    terminal = terminal or PromptToolkitTerminal()
    if args and args[0].lower() == RESET_FLAG:
        return reset(terminal)
    return asyncio.run(run(terminal))


if __name__ == "__main__":
    raise SystemExit(main())
