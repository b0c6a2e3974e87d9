from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict


CONFIG_ENV_VAR = "ANTIDELETE_CONFIG"
DEFAULT_CONFIG_PATH = Path("config.toml")
APP_TABLE = "antidelete"


def config_path() -> Path:
    """``$ANTIDELETE_CONFIG`` when set, else ``config.toml`` in the working dir."""
    override = os.getenv(CONFIG_ENV_VAR)
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_app_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Return the ``[antidelete]`` table of the config file.

    A missing file or a file without the table yields ``{}`` so every setting
    falls back to its environment variable. A non-table ``antidelete`` key is
    rejected with ``ValueError``.
    """
    target = Path(path) if path is not None else config_path()
    if not target.is_file():
        return {}

    with target.open("rb") as handle:
        raw = tomllib.load(handle)

    table = raw.get(APP_TABLE, {})
    if not isinstance(table, dict):
        raise ValueError(f"[{APP_TABLE}] in {target} must be a table")
    return table


__all__ = ["load_app_config", "config_path", "CONFIG_ENV_VAR", "DEFAULT_CONFIG_PATH"]
