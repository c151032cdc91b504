"""
Collaborator interfaces consumed by the core.

The ProcessInvoker reads its configuration through a SettingsProvider and
reports a missing binary through an InstallPrompt. Hosts plug in their own
implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.models import Settings


class SettingsProvider(ABC):
    """Source of bridge settings, consulted once per invocation."""

    @abstractmethod
    def load(self) -> "Settings":
        """
        Return the current settings.

        Called on every invocation; implementations must not cache so that
        edits take effect immediately.
        """
        pass


class InstallPrompt(ABC):
    """Notified when no usable opa binary can be found."""

    @abstractmethod
    def prompt(self) -> None:
        """Ask the user to install opa."""
        pass
