from __future__ import annotations

from pathlib import Path

import pytest

from henka.config import DEFAULT_CONFIG_TEMPLATE, Config, write_default_config

ENV_VARS = (
    "HENKA_LOG_LEVEL",
    "HENKA_LOG_FORMAT",
    "HENKA_MIGRATIONS_DIR",
    "HENKA_DATABASE",
    "HENKA_TABLE_NAME",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = Config.load(sources=[])

    assert config.general.log_level == "WARNING"
    assert config.general.log_format == "text"
    assert config.source.migrations_dir == Path("migrations")
    assert config.driver.table_name == "migrations_log"
    assert config.driver.database.name == "henka.db"


def test_later_files_override_earlier(tmp_path: Path) -> None:
    system = tmp_path / "system.toml"
    system.write_text(
        '[source]\nmigrations_dir = "/srv/migrations"\n[driver]\ntable_name = "system_log"\n',
        encoding="utf-8",
    )
    local = tmp_path / "local.toml"
    local.write_text('[driver]\ntable_name = "local_log"\ndatabase = "app.db"\n', encoding="utf-8")

    config = Config.load(sources=[system, tmp_path / "absent.toml", local])

    assert config.source.migrations_dir == Path("/srv/migrations")
    assert config.driver.table_name == "local_log"
    assert config.driver.database == Path("app.db")


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[general]\ncolour = "blue"\n[extra]\nx = 1\n', encoding="utf-8")

    config = Config.load(sources=[path])

    assert not hasattr(config.general, "colour")


def test_env_overrides_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[driver]\ntable_name = "file_log"\n', encoding="utf-8")
    monkeypatch.setenv("HENKA_TABLE_NAME", "env_log")
    monkeypatch.setenv("HENKA_MIGRATIONS_DIR", "db/migrations")
    monkeypatch.setenv("HENKA_LOG_LEVEL", "DEBUG")

    config = Config.load(sources=[path])

    assert config.driver.table_name == "env_log"
    assert config.source.migrations_dir == Path("db/migrations")
    assert config.general.log_level == "DEBUG"


def test_malformed_file_is_reported_and_skipped(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[driver\ntable_name = ", encoding="utf-8")

    config = Config.load(sources=[path])

    assert config.driver.table_name == "migrations_log"
    assert "Failed to load config" in capsys.readouterr().err


def test_default_template_round_trips(tmp_path: Path) -> None:
    written = write_default_config(tmp_path / "nested" / "config.toml")

    assert written.read_text(encoding="utf-8") == DEFAULT_CONFIG_TEMPLATE
    config = Config.load(sources=[written])
    assert config.source.migrations_dir == Path("migrations")
    assert config.driver.table_name == "migrations_log"


def test_to_dict() -> None:
    data = Config.load(sources=[]).to_dict()

    assert set(data) == {"general", "source", "driver"}
    assert data["source"]["migrations_dir"] == "migrations"
