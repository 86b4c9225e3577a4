"""Credential resolution for the ThreatConnect client.

Sources, lowest precedence first:

1. ``$XDG_CONFIG_HOME/tc-tui/config.toml`` (``~/.config/tc-tui/config.toml``)
2. a ``.env`` file in the working directory
3. the ``TC_ACCESS_ID``, ``TC_SECRET_KEY`` and ``TC_INSTANCE`` environment variables
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from tcsys.errors import ConfigError
from tcsys.utils.env import load_env_file_if_present

logger = logging.getLogger(__name__)

APP_NAME = "tc-tui"
CONFIG_KEYS = ("tc_access_id", "tc_secret_key", "tc_instance")


@dataclass(frozen=True)
class Identity:
    """Caller credentials plus the target instance."""

    access_id: str
    secret_key: str = field(repr=False)
    instance: str

    @property
    def base_url(self) -> str:
        return f"https://{self.instance}.threatconnect.com/api/v3"

    def missing_fields(self) -> list[str]:
        return [name for name in ("access_id", "secret_key", "instance") if not getattr(self, name)]


def default_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / APP_NAME / "config.toml"


def read_config_file(path: str | Path) -> dict[str, str]:
    """Read the subset of credential keys present in a TOML file.

    Unknown keys are ignored. Returns an empty dict when the file is absent.
    """
    config_path = Path(path)
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("rb") as fh:
            raw = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to parse config file at {config_path}: {e}") from e

    values = {}
    for key in CONFIG_KEYS:
        if key not in raw:
            continue
        if not isinstance(raw[key], str):
            raise ConfigError(
                f"{key} in {config_path} must be a string, got {type(raw[key]).__name__}"
            )
        values[key] = raw[key]
    logger.debug(f"Loaded {len(values)} credential keys from {config_path}")
    return values


@dataclass
class Config:
    tc_access_id: str = ""
    tc_secret_key: str = field(default="", repr=False)
    tc_instance: str = ""

    @classmethod
    def load(
        cls,
        config_path: str | Path | None = None,
        dotenv: bool = True,
        dotenv_path: str | Path = ".env",
    ) -> Config:
        """Merge file, .env and environment sources into a Config.

        Does not validate; call :meth:`validate` before building a client.
        """
        config = cls()
        config.merge(read_config_file(config_path or default_config_path()))

        if dotenv:
            loaded = load_env_file_if_present(dotenv_path)
            if loaded:
                logger.debug(f"Loaded {len(loaded)} variables from {dotenv_path}")

        config.merge(
            {
                key: os.environ[key.upper()]
                for key in CONFIG_KEYS
                if key.upper() in os.environ
            }
        )
        return config

    def merge(self, values: dict[str, str]) -> None:
        for key in CONFIG_KEYS:
            if key in values:
                setattr(self, key, values[key])

    def validate(self) -> None:
        """Raise ConfigError naming the first missing key."""
        for key in CONFIG_KEYS:
            if not getattr(self, key):
                raise ConfigError(
                    f"{key.upper()} is missing. "
                    "Please set it in config.toml or environment variables."
                )

    def identity(self) -> Identity:
        return Identity(
            access_id=self.tc_access_id,
            secret_key=self.tc_secret_key,
            instance=self.tc_instance,
        )
