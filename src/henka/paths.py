"""XDG Base Directory compliant paths for henka.

On Linux:
  - Data:   ~/.local/share/henka (XDG_DATA_HOME)
  - Config: ~/.config/henka (XDG_CONFIG_HOME)

On other platforms, falls back to ~/.henka.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_NAME: Final[str] = "henka"


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def _get_xdg_path(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory path with fallback to default."""
    if env_var in os.environ:
        return Path(os.environ[env_var]) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


@dataclass(frozen=True)
class XDGPaths:
    data_home: Path
    config_home: Path

    @classmethod
    def detect(cls) -> "XDGPaths":
        """Detect XDG-compliant paths for the current platform."""
        if _is_linux():
            return cls(
                data_home=_get_xdg_path("XDG_DATA_HOME", ".local/share"),
                config_home=_get_xdg_path("XDG_CONFIG_HOME", ".config"),
            )

        fallback = Path.home() / f".{APP_NAME}"
        return cls(
            data_home=fallback / "data",
            config_home=fallback / "config",
        )

    @property
    def db_path(self) -> Path:
        """Default SQLite database holding the migrations log."""
        return self.data_home / "henka.db"

    @property
    def config_file(self) -> Path:
        return self.config_home / "config.toml"


paths = XDGPaths.detect()
