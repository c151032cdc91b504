"""
Collaborator plugins.

Settings providers and install prompts the core consumes.
"""

from .base import SettingsProvider, InstallPrompt
from .settings import StaticSettingsProvider, YamlSettingsProvider, EnvSettingsProvider
from .install import ConsoleInstallPrompt, DownloadInstaller

__all__ = [
    "SettingsProvider",
    "InstallPrompt",
    "StaticSettingsProvider",
    "YamlSettingsProvider",
    "EnvSettingsProvider",
    "ConsoleInstallPrompt",
    "DownloadInstaller",
]
