"""
Helpers for executing OPA as a subprocess.

The ProcessInvoker locates the opa binary, runs it once per call with the
given arguments and stdin, and classifies the outcome.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from pydantic import ValidationError

from .errors import DecodeError
from .models import (
    BinaryNotFound,
    Failure,
    ModuleSummary,
    ParsedModule,
    ProcessStatus,
    RunResult,
    Settings,
    Success,
)
from .refs import ref_to_string

if TYPE_CHECKING:
    from ..plugins.base import InstallPrompt, SettingsProvider


logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = -1
SPAWN_ERROR_EXIT_CODE = -2


class ProcessInvoker:
    """
    Runs the opa binary as a child process.

    Settings are read from the provider on every call so that a changed
    override path is picked up without restarting.
    """

    def __init__(self, settings: "SettingsProvider", install_prompt: "InstallPrompt"):
        self.settings = settings
        self.install_prompt = install_prompt

    def locate(self, path: str, settings: Optional[Settings] = None) -> Optional[str]:
        """
        Resolve the executable to run.

        The configured override is preferred to the one found on $PATH.
        Returns None if neither exists or is executable.
        """
        if settings is None:
            settings = self.settings.load()
        override = settings.path
        if override and Path(override).is_file() and os.access(override, os.X_OK):
            return override
        return shutil.which(path)

    def run_with_status(
        self,
        path: str,
        args: list[str],
        stdin: str = "",
        timeout: Optional[float] = None,
    ) -> Union[ProcessStatus, BinaryNotFound]:
        """
        Execute the binary at path with args and stdin.

        Returns the exit status with the captured stderr and stdout. If the
        binary cannot be found the install prompt is triggered and
        BinaryNotFound is returned instead.

        Args:
            path: Name or path of the binary
            args: Arguments passed to the binary
            stdin: Text written to the child's stdin before it is closed
            timeout: Seconds to wait before killing the child; defaults to
                the configured timeout
        """
        settings = self.settings.load()
        resolved = self.locate(path, settings)
        if resolved is None:
            logger.warning("opa binary not found: %s", path)
            self.install_prompt.prompt()
            return BinaryNotFound(path=path)

        if timeout is None:
            timeout = settings.timeout

        logger.debug("spawn: %s args: %s", resolved, args)

        try:
            proc = subprocess.run(
                [resolved, *args],
                input=stdin,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %s seconds", resolved, timeout)
            return ProcessStatus(
                exit_code=TIMEOUT_EXIT_CODE,
                stderr=f"{resolved} timed out after {timeout} seconds",
            )
        except OSError as e:
            logger.warning("failed to spawn %s: %s", resolved, e)
            return ProcessStatus(exit_code=SPAWN_ERROR_EXIT_CODE, stderr=str(e))

        logger.debug("code: %d", proc.returncode)
        logger.debug("stdout: %s", proc.stdout)
        logger.debug("stderr: %s", proc.stderr)

        return ProcessStatus(
            exit_code=proc.returncode,
            stderr=proc.stderr,
            stdout=proc.stdout,
        )

    def run(
        self,
        path: str,
        args: list[str],
        stdin: str = "",
        timeout: Optional[float] = None,
    ) -> RunResult:
        """
        Execute the binary at path with args and stdin.

        On a zero exit status stdout is decoded as JSON. Otherwise the failure
        message is stdout if non-empty, else stderr.

        Raises:
            DecodeError: if the binary succeeded but stdout is not JSON
        """
        status = self.run_with_status(path, args, stdin, timeout=timeout)
        if isinstance(status, BinaryNotFound):
            return status

        if status.exit_code != 0:
            if status.stdout != "":
                return Failure(message=status.stdout)
            return Failure(message=status.stderr)

        try:
            return Success(value=json.loads(status.stdout))
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON output from {path}: {e}", status.stdout) from e

    def parse_file(
        self, path: str, file_path: str | Path
    ) -> Union[ModuleSummary, Failure, BinaryNotFound]:
        """
        Parse a Rego file and extract its package and imports.

        Raises:
            DecodeError: if the parse output is not a Rego module
        """
        result = self.run(path, ["parse", str(file_path), "--format", "json"], "")
        if not isinstance(result, Success):
            return result

        try:
            module = ParsedModule.model_validate(result.value)
        except ValidationError as e:
            raise DecodeError(f"Unexpected parse output for {file_path}: {e}") from e

        return summarize(module)


def get_package(module: ParsedModule) -> str:
    """Package name without the leading ``data`` root."""
    return ref_to_string(module.package.path[1:]) if len(module.package.path) > 1 else ""


def get_imports(module: ParsedModule) -> list[str]:
    imports = []
    for imp in module.imports:
        name = ref_to_string(imp.ref())
        if imp.alias:
            name = f"{name} as {imp.alias}"
        imports.append(name)
    return imports


def summarize(module: ParsedModule) -> ModuleSummary:
    return ModuleSummary(namespace=get_package(module), dependencies=get_imports(module))
