"""
Version resolution for the installed opa binary.

Parses ``<major>.<minor>.<point>[-<patch>]`` version strings, orders them,
and derives which CLI conventions the installed binary supports. Nothing is
cached: every decision re-queries the binary so that an upgrade takes effect
on the next call.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .models import BinaryNotFound, SemVer

if TYPE_CHECKING:
    from .invoker import ProcessInvoker


logger = logging.getLogger(__name__)

# We don't have a precise version for the bundle flag change so rely on
# the -dev tag.
BUNDLE_MIN_VERSION = "0.14.0-dev"

VERSION_KEY = "Version"

_NUMBER = re.compile(
    r"[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|Infinity)"
)
_RADIX = {"0x": 16, "0o": 8, "0b": 2}


def to_number(s: str) -> float:
    """Convert a string the way ``Number()`` does in a browser.

    Whitespace is ignored, the empty string is zero and anything that is not
    a decimal, ``Infinity`` or a 0x/0o/0b literal is ``nan``.
    """
    s = s.strip()
    if s == "":
        return 0.0
    if _NUMBER.fullmatch(s):
        return float(s.replace("Infinity", "inf"))
    radix = _RADIX.get(s[:2].lower())
    if radix is not None:
        try:
            return float(int(s[2:], radix))
        except ValueError:
            return math.nan
    return math.nan


def parse_version(s: str) -> Optional[SemVer]:
    """
    Parse an OPA semantic version.

    Returns None if ``s`` does not have at least three dot-separated parts.
    Anything after a third dot is ignored.
    """
    parts = s.split(".")[:3]
    if len(parts) < 3:
        return None

    point_parts = parts[2].split("-")[:2]
    patch = point_parts[1] if len(point_parts) >= 2 else ""

    return SemVer(
        major=to_number(parts[0]),
        minor=to_number(parts[1]),
        point=to_number(point_parts[0]),
        patch=patch,
    )


def _order_key(x: float) -> tuple[int, float]:
    # nan sorts below every number and equal to itself
    if math.isnan(x):
        return (0, 0.0)
    return (1, x)


def same_or_newer(a: str, b: str) -> bool:
    """
    Return True if OPA version ``a`` is the same or newer than version ``b``.

    If either version is not in the expected format this returns True.
    Major, minor and point versions are compared numerically. Patch versions
    are compared lexicographically, except that an empty patch version is
    considered newer than a non-empty one.
    """
    a_version = parse_version(a)
    b_version = parse_version(b)

    if a_version is None or b_version is None:
        return True

    for x, y in zip(a_version.numeric(), b_version.numeric()):
        if _order_key(x) > _order_key(y):
            return True
        elif _order_key(y) > _order_key(x):
            return False

    if a_version.patch == "" and b_version.patch != "":
        return True
    elif a_version.patch != "" and b_version.patch == "":
        return False

    return a_version.patch >= b_version.patch


def data_flag(bundle: bool) -> str:
    """Flag used to pass a data directory to ``opa eval``/``opa test``."""
    return "--bundle" if bundle else "--data"


def version_from_output(output: str) -> str:
    """Extract the ``Version: ...`` value from ``opa version`` output."""
    for line in output.split("\n"):
        parts = line.strip().split(": ", 1)
        if len(parts) < 2:
            continue
        if parts[0] == VERSION_KEY:
            return parts[1]
    return ""


class Compatibility:
    """
    Decides which CLI conventions the installed opa binary supports.

    Every method queries the binary again; results are never memoized.
    """

    def __init__(self, invoker: "ProcessInvoker", binary: str = "opa"):
        self.invoker = invoker
        self.binary = binary

    def installed_version_string(self) -> str:
        """Return the installed OPA version, or "" if it cannot be determined."""
        status = self.invoker.run_with_status(self.binary, ["version"])
        if isinstance(status, BinaryNotFound):
            return ""
        if status.exit_code != 0:
            logger.debug("opa version exited with %d", status.exit_code)
            return ""
        return version_from_output(status.stdout)

    def installed_same_or_newer(self, version: str) -> bool:
        return same_or_newer(self.installed_version_string(), version)

    def can_use_bundle_flags(self) -> bool:
        return self.installed_same_or_newer(BUNDLE_MIN_VERSION)

    def data_param(self) -> str:
        return data_flag(self.can_use_bundle_flags())

    def data_dir(self, path: str | Path) -> str:
        """
        Canonical representation of a data root for the installed binary.

        Older binaries only accept a filesystem path; newer ones take a URI.
        """
        resolved = Path(path).resolve()
        if not self.can_use_bundle_flags():
            return str(resolved)
        return resolved.as_uri()
