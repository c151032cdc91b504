"""
Settings providers.

Each provider returns fresh Settings on every load() call.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from .base import SettingsProvider
from ..core.errors import SettingsError
from ..core.models import Settings


class StaticSettingsProvider(SettingsProvider):
    """Fixed in-memory settings."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def load(self) -> Settings:
        return self.settings


class YamlSettingsProvider(SettingsProvider):
    """
    Reads settings from a YAML file.

    Example file:

        opa:
          path: /usr/local/bin/opa
          timeout: 30

    A missing file yields default settings.
    """

    def __init__(self, settings_path: str | Path, section: str = "opa"):
        self.settings_path = Path(settings_path)
        self.section = section

    def load(self) -> Settings:
        if not self.settings_path.exists():
            return Settings()

        try:
            with open(self.settings_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Failed to parse {self.settings_path}: {e}") from e

        if not isinstance(data, dict):
            raise SettingsError(f"Expected a mapping in {self.settings_path}")

        section = data.get(self.section) or {}
        try:
            return Settings(**section)
        except (TypeError, ValidationError) as e:
            raise SettingsError(f"Invalid settings in {self.settings_path}: {e}") from e


class EnvSettingsProvider(SettingsProvider):
    """Reads OPA_PATH and OPA_TIMEOUT from the environment."""

    def __init__(self, prefix: str = "OPA_"):
        self.prefix = prefix

    def load(self) -> Settings:
        path = os.environ.get(f"{self.prefix}PATH") or None
        timeout = os.environ.get(f"{self.prefix}TIMEOUT") or None
        try:
            return Settings(path=path, timeout=timeout)
        except ValidationError as e:
            raise SettingsError(f"Invalid {self.prefix}* environment: {e}") from e
