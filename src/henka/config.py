"""TOML configuration file support for henka.

Loads configuration from:
1. System: /etc/henka/config.toml
2. User: ~/.config/henka/config.toml (XDG_CONFIG_HOME)
3. Local: ./.henka.toml (project-specific)
4. Environment variables (highest priority)

Configuration is merged in order, with later sources overriding earlier ones.
The migration file naming convention is fixed and cannot be configured.
"""

from __future__ import annotations

import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from henka.driver.sqlite import DEFAULT_TABLE_NAME
from henka.paths import paths


@dataclass
class GeneralConfig:
    log_level: str = "WARNING"
    log_format: str = "text"  # "text" or "json"


@dataclass
class SourceConfig:
    """Where migration scripts are discovered."""

    migrations_dir: Path = Path("migrations")


@dataclass
class DriverConfig:
    """Where the application log is stored."""

    database: Path = field(default_factory=lambda: paths.db_path)
    table_name: str = DEFAULT_TABLE_NAME


@dataclass
class Config:
    """Complete henka configuration."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    driver: DriverConfig = field(default_factory=DriverConfig)

    @classmethod
    def load(cls, sources: list[Path] | None = None) -> "Config":
        """Load configuration from all sources."""
        config = cls()

        if sources is None:
            sources = [
                Path("/etc/henka/config.toml"),
                paths.config_file,
                Path.cwd() / ".henka.toml",
            ]

        for source in sources:
            if source.exists():
                config = config._merge_from_file(source)

        return config._apply_env_overrides()

    def _merge_from_file(self, path: Path) -> "Config":
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            # Report but keep going with what we have
            print(f"Warning: Failed to load config from {path}: {e}", file=sys.stderr)
            return self
        return self._merge_dict(data)

    def _merge_dict(self, data: dict[str, Any]) -> "Config":
        if "general" in data:
            self.general = _merge_dataclass(self.general, data["general"])
        if "source" in data:
            self.source = _merge_dataclass(self.source, data["source"])
        if "driver" in data:
            self.driver = _merge_dataclass(self.driver, data["driver"])
        return self

    def _apply_env_overrides(self) -> "Config":
        env_mappings = {
            "HENKA_LOG_LEVEL": ("general", "log_level", str),
            "HENKA_LOG_FORMAT": ("general", "log_format", str),
            "HENKA_MIGRATIONS_DIR": ("source", "migrations_dir", Path),
            "HENKA_DATABASE": ("driver", "database", Path),
            "HENKA_TABLE_NAME": ("driver", "table_name", str),
        }

        for env_var, (section_name, field_name, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                setattr(getattr(self, section_name), field_name, converter(value))

        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "general": {
                "log_level": self.general.log_level,
                "log_format": self.general.log_format,
            },
            "source": {
                "migrations_dir": str(self.source.migrations_dir),
            },
            "driver": {
                "database": str(self.driver.database),
                "table_name": self.driver.table_name,
            },
        }


def _merge_dataclass(obj: Any, data: dict[str, Any]) -> Any:
    """Merge dictionary values into a dataclass instance."""
    for key, value in data.items():
        if hasattr(obj, key):
            if isinstance(getattr(obj, key), Path):
                value = Path(value)
            setattr(obj, key, value)
    return obj


DEFAULT_CONFIG_TEMPLATE = """\
# henka configuration
# Environment variables (HENKA_*) override these settings.

[general]
# Log level: DEBUG, INFO, WARNING, ERROR
log_level = "WARNING"

# Log format: "text" or "json"
log_format = "text"

[source]
# Directory holding V<version>_<name>.up.hmf / .down.hmf scripts
migrations_dir = "migrations"

[driver]
# SQLite database holding the migrations log
# database = "/path/to/app.db"
table_name = "migrations_log"
"""


def write_default_config(path: Path | None = None) -> Path:
    """Write the default configuration file and return its path."""
    if path is None:
        path = paths.config_file

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    return path


_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config
