"""
Install prompts and the opa downloader.

ConsoleInstallPrompt tells the user how to get opa. DownloadInstaller fetches
the release binary for the current platform from openpolicyagent.org.
"""

from __future__ import annotations

import logging
import platform
import stat
import sys
from pathlib import Path

import click
import requests

from .base import InstallPrompt
from ..core.errors import InstallError


logger = logging.getLogger(__name__)

DOWNLOAD_URL = "https://openpolicyagent.org/downloads"
INSTALL_DOCS_URL = "https://www.openpolicyagent.org/docs/latest/#running-opa"

ARCHES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64_static",
    "aarch64": "arm64_static",
}


class ConsoleInstallPrompt(InstallPrompt):
    """Prints install instructions to stderr."""

    def prompt(self) -> None:
        click.echo(
            click.style("opa binary not found.", fg="yellow")
            + f" Install it from {INSTALL_DOCS_URL}, run `regobridge install`,"
            + " or set `opa.path` in your settings.",
            err=True,
        )


def release_asset(system: str | None = None, machine: str | None = None) -> str:
    """
    Name of the release binary for a platform.

    Example: ``opa_linux_amd64``, ``opa_darwin_arm64_static``,
    ``opa_windows_amd64.exe``.
    """
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()

    arch = ARCHES.get(machine)
    if arch is None:
        raise InstallError(f"Unsupported architecture: {machine}")

    if system == "windows":
        return f"opa_windows_{arch}.exe"
    if system in ("linux", "darwin"):
        return f"opa_{system}_{arch}"
    raise InstallError(f"Unsupported platform: {system}")


class DownloadInstaller:
    """Downloads an opa release into a directory."""

    def __init__(self, version: str = "latest", base_url: str = DOWNLOAD_URL):
        self.version = version
        self.base_url = base_url.rstrip("/")

    def url(self, asset: str | None = None) -> str:
        version = self.version
        if version != "latest" and not version.startswith("v"):
            version = f"v{version}"
        return f"{self.base_url}/{version}/{asset or release_asset()}"

    def install(self, dest_dir: str | Path, asset: str | None = None) -> Path:
        """
        Download the binary and make it executable.

        Returns:
            Path to the installed binary
        """
        dest = Path(dest_dir)
        dest.mkdir(parents=True, exist_ok=True)
        target = dest / ("opa.exe" if sys.platform.startswith("win") else "opa")
        url = self.url(asset)

        logger.info("Downloading %s to %s", url, target)
        try:
            with requests.get(url, stream=True, timeout=60) as resp:
                resp.raise_for_status()
                with open(target, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=1 << 16):
                        f.write(chunk)
        except requests.RequestException as e:
            raise InstallError(f"Failed to download {url}: {e}") from e

        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return target
