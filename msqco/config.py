"""Connection profile persistence and first-run setup."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from . import console
from .console import Terminal

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path("config.json")
LOG_FILE = Path("console.log")

CONFIG_PATH_ENV = "MSQCO_CONFIG_PATH"
LOG_PATH_ENV = "MSQCO_LOG_PATH"

DEFAULT_PORT = 3306


class ConfigLoadError(RuntimeError):
    """Raised when the persisted profile cannot be read or validated."""


class JdbcProfile(BaseModel):
    """Profile holding a single connection URL."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["jdbc"] = "jdbc"
    jdbc: str


class ClassicProfile(BaseModel):
    """Profile holding discrete server/database/credential fields."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["classic"] = "classic"
    server: str
    port: int = DEFAULT_PORT
    database: str = ""
    user: str = ""
    password: str = ""


ConnectionProfile = Annotated[Union[JdbcProfile, ClassicProfile], Field(discriminator="mode")]

_PROFILE_ADAPTER: TypeAdapter[JdbcProfile | ClassicProfile] = TypeAdapter(ConnectionProfile)


def _expand(raw: str) -> Path:
    return Path(os.path.expandvars(raw)).expanduser()


def config_path() -> Path:
    """Location of the persisted profile, honouring the env override."""

    override = os.environ.get(CONFIG_PATH_ENV)
    return _expand(override) if override else CONFIG_FILE


def log_path() -> Path:
    """Location of the session transcript, honouring the env override."""

    override = os.environ.get(LOG_PATH_ENV)
    return _expand(override) if override else LOG_FILE


def load_profile(path: Path | None = None) -> JdbcProfile | ClassicProfile:
    """Parse the persisted profile; any defect is fatal."""

    target = path or config_path()
    try:
        raw = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"Cannot read {target}: {exc}") from exc
    try:
        return _PROFILE_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise ConfigLoadError(f"Invalid configuration in {target}: {exc}") from exc


def save_profile(profile: JdbcProfile | ClassicProfile, path: Path | None = None) -> Path:
    """Persist a profile as indented JSON."""

    target = path or config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(profile.model_dump_json(indent=2) + "\n", encoding="utf-8")
    LOG.debug("Saved %s profile to %s", profile.mode, target)
    return target


async def load_or_create(terminal: Terminal, path: Path | None = None) -> JdbcProfile | ClassicProfile:
    """Return the stored profile, prompting for one on first run."""

    target = path or config_path()
    if target.exists():
        return load_profile(target)

    profile = await prompt_profile(terminal)
    save_profile(profile, target)
    terminal.emit(console.plain(f"\nConfiguration enregistrée dans {target.name}.\n"))
    return profile


async def prompt_profile(terminal: Terminal) -> JdbcProfile | ClassicProfile:
    """Interactively collect a profile from the operator."""

    terminal.emit(console.plain("--- Configuration de la connexion MySQL ---"))
    terminal.emit(console.Message("Choisissez le mode de saisie :", console.Severity.PROMPT))
    terminal.emit(console.plain("  1) JDBC URL complète"))
    terminal.emit(console.plain("  2) Mode classique (hôte, base, utilisateur, mot de passe)"))

    choice = ""
    while choice not in {"1", "2"}:
        choice = (await terminal.ask("Votre choix (1 ou 2) : ")).strip()

    if choice == "1":
        return JdbcProfile(jdbc=(await terminal.ask("JDBC URL : ")).strip())

    server = ""
    while not server.strip():
        server = await terminal.ask("Serveur (ou IP) : ")
    port = parse_port(await terminal.ask(f"Port [{DEFAULT_PORT}] : "))
    database = await terminal.ask("Base de données : ")
    user = await terminal.ask("Utilisateur : ")
    password = await terminal.ask_password("Mot de passe : ")
    return ClassicProfile(
        server=server.strip(),
        port=port,
        database=database.strip(),
        user=user.strip(),
        password=password,
    )


def parse_port(raw: str) -> int:
    """Parse a port answer, falling back to 3306. The range is not checked."""

    try:
        return int(raw.strip())
    except ValueError:
        return DEFAULT_PORT


def reset_files(config_file: Path | None = None, log_file: Path | None = None) -> list[Path]:
    """Delete the stored profile and the transcript; missing files are fine."""

    removed: list[Path] = []
    for target in (config_file or config_path(), log_file or log_path()):
        try:
            target.unlink()
        except FileNotFoundError:
            continue
        removed.append(target)
    LOG.debug("Reset removed %s", [str(item) for item in removed])
    return removed


__all__ = [
    "CONFIG_FILE",
    "ClassicProfile",
    "ConfigLoadError",
    "ConnectionProfile",
    "JdbcProfile",
    "LOG_FILE",
    "config_path",
    "load_or_create",
    "load_profile",
    "log_path",
    "parse_port",
    "prompt_profile",
    "reset_files",
    "save_profile",
]
