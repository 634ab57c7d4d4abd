"""Terminal input/output for the console client."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol, runtime_checkable

from prompt_toolkit import PromptSession
from rich.console import Console
from rich.theme import Theme


class Severity(str, Enum):
    """Semantic tag attached to every line the client prints."""

    PLAIN = "plain"
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    PROMPT = "prompt"
    HEADER = "header"
    BANNER = "banner"


@dataclass(frozen=True, slots=True)
class Message:
    """A line of output plus the severity the renderer should style it with."""

    text: str
    severity: Severity = Severity.PLAIN


_BANNER = (
    "=============================================",
    " MySql Connection Tool                       ",
    "=============================================",
)


def plain(text: str) -> Message:
    return Message(text, Severity.PLAIN)


def info(text: str) -> Message:
    return Message(f"[INFO]    {text}", Severity.INFO)


def success(text: str) -> Message:
    return Message(f"[SUCCESS] {text}", Severity.SUCCESS)


def error(text: str) -> Message:
    return Message(f"[ERROR]   {text}", Severity.ERROR)


def header(columns: Iterable[str]) -> Message:
    """Column names of a result set, tab separated."""

    return Message("\t".join(columns), Severity.HEADER)


def row(values: Iterable[str]) -> Message:
    return Message("\t".join(values), Severity.PLAIN)


def banner() -> Message:
    return Message("\n".join(_BANNER), Severity.BANNER)


@runtime_checkable
class Terminal(Protocol):
    """Operator-facing I/O used by the config prompts and the statement loop."""

    async def ask(self, prompt: str) -> str:
        """Read one line; raises EOFError when the input stream is closed."""

    async def ask_password(self, prompt: str) -> str:
        """Read one line without echoing the typed characters."""

    def emit(self, message: Message) -> None:
        """Print one message."""


_THEME = Theme(
    {
        "plain": "default",
        "info": "white",
        "success": "green",
        "error": "red",
        "prompt": "yellow",
        "header": "cyan",
        "banner": "magenta",
    }
)


class PromptToolkitTerminal:
    """Terminal backed by prompt_toolkit for input and Rich for output."""

    def __init__(self, console: Console | None = None) -> None:
        if console is None:
            console = Console(theme=_THEME, highlight=False)
        else:
            console.push_theme(_THEME)
        self._console = console
        self._session: PromptSession[str] | None = None

    @property
    def console(self) -> Console:
        return self._console

    async def ask(self, prompt: str) -> str:
        if self._session is None:
            self._session = PromptSession()
        return await self._session.prompt_async(prompt)

    async def ask_password(self, prompt: str) -> str:
        session: PromptSession[str] = PromptSession()
        return await session.prompt_async(prompt, is_password=True)

    def emit(self, message: Message) -> None:
        self._console.print(message.text, style=message.severity.value, markup=False)


__all__ = [
    "Message",
    "PromptToolkitTerminal",
    "Severity",
    "Terminal",
    "banner",
    "error",
    "header",
    "info",
    "plain",
    "row",
    "success",
]
