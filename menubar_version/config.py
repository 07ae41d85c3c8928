"""
Process-wide configuration.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from . import __version__
from .errors import ConfigError


logger = logging.getLogger(__name__)

CONFIG_PATH = Path("bitbar") / "plugins" / "bitbar-version.json"
DATA_PATH = Path("bitbar") / "plugin-cache" / "bitbar-version.json"
PLUGIN_REPO = "fenhl/bitbar-version"


def _xdg_dir(environ: Mapping[str, str], variable: str, fallback: str) -> Path:
    value = environ.get(variable)
    if value:
        return Path(value)
    return Path(environ.get("HOME") or Path.home()) / fallback


def config_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    return _xdg_dir(os.environ if environ is None else environ, "XDG_CONFIG_HOME", ".config")


def data_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    return _xdg_dir(os.environ if environ is None else environ, "XDG_DATA_HOME", ".local/share")


@dataclass(frozen=True)
class Config:
    """Settings shared by every lookup in a run."""

    github_token: Optional[str] = None
    timeout: float = 30.0
    user_agent: str = f"menubar-version/{__version__}"

    def github_headers(self) -> dict:
        headers = {"Accept": "application/vnd.github+json"}
        if self.github_token:
            headers["Authorization"] = f"token {self.github_token}"
        return headers


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load the config file, letting ``GITHUB_TOKEN`` override the token.

    Args:
        path: Config file location. Defaults to the XDG config directory.
        environ: Environment mapping, ``os.environ`` when omitted.

    Returns:
        The loaded configuration; defaults when the file does not exist.
    """
    environ = os.environ if environ is None else environ
    path = path or config_home(environ) / CONFIG_PATH

    token: Optional[str] = None
    if path.exists():
        logger.debug("Loading config from %s", path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"could not read config file {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"config file {path} must contain a JSON object")
        token = raw.get("githubToken")
        if token is not None and not isinstance(token, str):
            raise ConfigError(f"githubToken in {path} must be a string")

    token = environ.get("GITHUB_TOKEN") or token
    return Config(github_token=token)
