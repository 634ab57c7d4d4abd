"""End-to-end tests for the command-line entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from msqco import app
from msqco import config as config_module
from msqco.console import Message, Severity


class _ScriptedTerminal:
    def __init__(self, lines: list[str], passwords: list[str] | None = None) -> None:
        self.lines = list(lines)
        self.passwords = list(passwords or [])
        self.messages: list[Message] = []

    async def ask(self, prompt: str) -> str:
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)

    async def ask_password(self, prompt: str) -> str:
        return self.passwords.pop(0)

    def emit(self, message: Message) -> None:
        self.messages.append(message)

    def texts(self, severity: Severity) -> list[str]:
        return [m.text for m in self.messages if m.severity is severity]


class _FakeCursor:
    def __init__(self, conn: "_FakeMysql") -> None:
        self._conn = conn
        self.description: tuple[tuple[str], ...] | None = None
        self._rows: list[tuple[Any, ...]] = []

    async def execute(self, sql: str) -> int:
        self._conn.statements.append(sql)
        if sql.strip().upper() == "SELECT 1":
            self.description = (("1",),)
            self._rows = [(1,)]
            return 1
        raise RuntimeError(f"You have an error in your SQL syntax near '{sql}'")

    async def fetchone(self) -> tuple[Any, ...] | None:
        return self._rows.pop(0) if self._rows else None

    async def close(self) -> None:
        return None


class _FakeMysql:
    def __init__(self) -> None:
        self.statements: list[str] = []
        self.closed = 0

    async def cursor(self, *_args: Any) -> _FakeCursor:
        return _FakeCursor(self)

    def close(self) -> None:
        self.closed += 1


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.delenv("MSQCO_CONFIG_PATH", raising=False)
    monkeypatch.delenv("MSQCO_LOG_PATH", raising=False)
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.setattr(config_module, "LOG_FILE", tmp_path / "console.log")
    return tmp_path


@pytest.fixture
def fake_mysql(monkeypatch: pytest.MonkeyPatch) -> tuple[_FakeMysql, dict[str, Any]]:
    fake = _FakeMysql()
    seen: dict[str, Any] = {}

    async def _connect(**kwargs: Any) -> _FakeMysql:
        seen.update(kwargs)
        return fake

    monkeypatch.setattr("msqco.connections.aiomysql.connect", _connect)
    return fake, seen


def test_first_run_classic_profile_select_then_exit(workspace: Path, fake_mysql) -> None:
    fake, seen = fake_mysql
    terminal = _ScriptedTerminal(
        ["2", "localhost", "", "test", "root", "SELECT 1", "exit"],
        passwords=["secret"],
    )

    code = app.main([], terminal=terminal)

    assert code == 0
    assert seen["host"] == "localhost"
    assert seen["port"] == 3306
    assert seen["db"] == "test"
    assert seen["user"] == "root"
    assert seen["password"] == "secret"
    assert terminal.texts(Severity.HEADER) == ["1"]
    assert terminal.texts(Severity.PLAIN)[-1] == "1"
    assert fake.closed == 1
    assert (workspace / "config.json").exists()
    lines = (workspace / "console.log").read_text(encoding="utf-8").split("\n")
    assert lines[0].startswith("-- Nouvelle session démarrée le ")
    assert lines[1].endswith("Connexion réussie.")
    assert lines[2].startswith("[COMMAND]") and lines[2].endswith("SELECT 1")
    assert lines[3].endswith("Requête SELECT exécutée.")
    assert lines[4].endswith("Déconnexion.")
    assert lines[5:] == ["", ""]


def test_second_run_reuses_profile_and_survives_bad_statement(workspace: Path, fake_mysql) -> None:
    fake, seen = fake_mysql
    config_module.save_profile(config_module.JdbcProfile(jdbc="jdbc:mysql://app:pw@db:3307/shop"))
    terminal = _ScriptedTerminal(["SELEC oops", "SELECT 1", "EXIT"])

    code = app.main([], terminal=terminal)

    assert code == 0
    assert seen["host"] == "db"
    assert seen["port"] == 3307
    assert fake.statements == ["SELEC oops", "SELECT 1"]
    log = (workspace / "console.log").read_text(encoding="utf-8")
    assert log.count("Erreur SQL") == 1
    assert log.count("Déconnexion.") == 1


def test_connection_failure_exits_without_entering_loop(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    async def _connect(**kwargs: Any) -> None:
        raise OSError("Access denied for user 'root'")

    monkeypatch.setattr("msqco.connections.aiomysql.connect", _connect)
    config_module.save_profile(config_module.ClassicProfile(server="h", database="d", user="root", password="x"))
    terminal = _ScriptedTerminal(["SELECT 1"])

    code = app.main([], terminal=terminal)

    assert code == 1
    assert terminal.lines == ["SELECT 1"]
    assert any("Access denied" in text for text in terminal.texts(Severity.ERROR))
    log = (workspace / "console.log").read_text(encoding="utf-8")
    assert "[ERROR]" in log and "Échec connexion : Access denied" in log
    assert log.endswith("\n\n")


def test_malformed_url_aborts_startup(workspace: Path, fake_mysql) -> None:
    fake, seen = fake_mysql
    config_module.save_profile(config_module.JdbcProfile(jdbc="jdbc:mysql://h:notaport/db"))
    terminal = _ScriptedTerminal([])

    code = app.main([], terminal=terminal)

    assert code == 1
    assert seen == {}
    assert terminal.texts(Severity.ERROR)


def test_malformed_config_aborts_before_connecting(workspace: Path, fake_mysql) -> None:
    fake, seen = fake_mysql
    (workspace / "config.json").write_text("{broken")
    terminal = _ScriptedTerminal([])

    code = app.main([], terminal=terminal)

    assert code == 1
    assert seen == {}
    assert terminal.texts(Severity.ERROR)
    assert (workspace / "config.json").read_text() == "{broken"


def test_undecodable_config_aborts_before_connecting(workspace: Path, fake_mysql) -> None:
    fake, seen = fake_mysql
    (workspace / "config.json").write_bytes(b"\xff\xfe\x00")
    terminal = _ScriptedTerminal([])

    code = app.main([], terminal=terminal)

    assert code == 1
    assert seen == {}
    assert terminal.texts(Severity.ERROR)


@pytest.mark.parametrize("flag", ["--reset", "--RESET", "--Reset"])
def test_reset_deletes_files_without_connecting(workspace: Path, fake_mysql, flag: str) -> None:
    fake, seen = fake_mysql
    (workspace / "config.json").write_text("{}")
    (workspace / "console.log").write_text("old\n")
    terminal = _ScriptedTerminal([])

    code = app.main([flag], terminal=terminal)

    assert code == 0
    assert seen == {}
    assert not (workspace / "config.json").exists()
    assert not (workspace / "console.log").exists()
    assert terminal.messages[-1].text == "Configuration et journal supprimés."


def test_reset_without_files_is_a_noop(workspace: Path) -> None:
    terminal = _ScriptedTerminal([])

    assert app.main(["--reset"], terminal=terminal) == 0
    assert list(workspace.iterdir()) == []


def test_interrupted_first_run_setup_writes_nothing(workspace: Path, fake_mysql) -> None:
    fake, seen = fake_mysql
    terminal = _ScriptedTerminal(["2", "localhost"])

    code = app.main([], terminal=terminal)

    assert code == 1
    assert seen == {}
    assert not (workspace / "config.json").exists()
    assert not (workspace / "console.log").exists()
