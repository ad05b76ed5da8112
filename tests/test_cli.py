from __future__ import annotations

import json
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

import henka.config as config_mod
from henka import cli
from henka.config import Config
from henka.driver import SqliteDriver
from henka.migration import Direction, Migration

from tests.conftest import at, touch

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, reset_logging: None
) -> Config:
    config = Config.load(sources=[])
    config.driver.database = tmp_path / "default.db"
    config.source.migrations_dir = tmp_path / "migrations"
    monkeypatch.setattr(config_mod, "_config", config)
    monkeypatch.setattr(cli, "console", Console(width=300, color_system=None))
    return config


@pytest.fixture
def project(tmp_path: Path) -> tuple[Path, Path]:
    migrations = tmp_path / "migrations"
    touch(
        migrations,
        "V20211224081255_initial.up.hmf",
        "V20211224091800_users.up.hmf",
        "V20211224091800_users.down.hmf",
    )
    db_path = tmp_path / "app.db"
    driver = SqliteDriver(db_path)
    driver.record_migration(Migration(version=20211224081255, name="initial"), Direction.UP, at(100))
    driver.close()
    return migrations, db_path


def test_version() -> None:
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert "henka version" in result.stdout


def test_status_table(project: tuple[Path, Path]) -> None:
    migrations, db_path = project

    result = runner.invoke(cli.app, ["status", "--dir", str(migrations), "--db", str(db_path)])

    assert result.exit_code == 0
    assert "initial" in result.stdout
    assert "users" in result.stdout
    assert "applied: 1" in result.stdout
    assert "pending: 1" in result.stdout


def test_status_json(project: tuple[Path, Path]) -> None:
    migrations, db_path = project

    result = runner.invoke(
        cli.app, ["status", "--dir", str(migrations), "--db", str(db_path), "--json"]
    )

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["applied_count"] == 1
    assert data["pending_count"] == 1
    assert [m["status"] for m in data["migrations"]] == ["applied", "pending"]


def test_status_uses_configured_paths(project: tuple[Path, Path], cli_env: Config) -> None:
    _, db_path = project
    cli_env.driver.database = db_path

    result = runner.invoke(cli.app, ["status"])

    assert result.exit_code == 0
    assert "applied: 1" in result.stdout


def test_status_missing_exits_non_zero(project: tuple[Path, Path]) -> None:
    migrations, db_path = project
    (migrations / "V20211224081255_initial.up.hmf").unlink()

    result = runner.invoke(cli.app, ["status", "--dir", str(migrations), "--db", str(db_path)])

    assert result.exit_code == cli.EXIT_MISSING
    assert "missing: 1" in result.stdout


def test_status_bad_directory(tmp_path: Path) -> None:
    result = runner.invoke(
        cli.app, ["status", "--dir", str(tmp_path / "nope"), "--db", str(tmp_path / "app.db")]
    )

    assert result.exit_code == cli.EXIT_ERROR
    assert "Error" in result.stdout


def test_status_duplicate_version(project: tuple[Path, Path]) -> None:
    migrations, db_path = project
    touch(migrations, "V20211224091800_users_again.up.hmf")

    result = runner.invoke(cli.app, ["status", "--dir", str(migrations), "--db", str(db_path)])

    assert result.exit_code == cli.EXIT_ERROR
    assert "conflicting names" in result.stdout


def test_config_show() -> None:
    result = runner.invoke(cli.app, ["config", "show"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["driver"]["table_name"] == "migrations_log"


def test_config_init(tmp_path: Path) -> None:
    target = tmp_path / "henka" / "config.toml"

    first = runner.invoke(cli.app, ["config", "init", "--path", str(target)])
    again = runner.invoke(cli.app, ["config", "init", "--path", str(target)])
    forced = runner.invoke(cli.app, ["config", "init", "--path", str(target), "--force"])

    assert first.exit_code == 0
    assert target.exists()
    assert again.exit_code == 1
    assert forced.exit_code == 0


def test_status_shows_bracketed_names_verbatim(tmp_path: Path) -> None:
    migrations = tmp_path / "bracketed"
    touch(migrations, "V20211224091800_add[bold]_users.up.hmf")

    result = runner.invoke(
        cli.app, ["status", "--dir", str(migrations), "--db", str(tmp_path / "app.db")]
    )

    assert result.exit_code == 0
    assert "add[bold]_users" in result.stdout


def test_status_duplicate_error_keeps_bracketed_names(tmp_path: Path) -> None:
    migrations = tmp_path / "bracketed"
    touch(
        migrations,
        "V20211224091800_add[bold]_users.up.hmf",
        "V20211224091800_other[red].up.hmf",
    )

    result = runner.invoke(
        cli.app, ["status", "--dir", str(migrations), "--db", str(tmp_path / "app.db")]
    )

    assert result.exit_code == cli.EXIT_ERROR
    assert '"add[bold]_users"' in result.stdout
    assert '"other[red]"' in result.stdout
