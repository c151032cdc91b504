"""
Core modules for the OPA bridge.
"""

from .models import (
    SemVer,
    ProcessStatus,
    Success,
    Failure,
    BinaryNotFound,
    RunResult,
    Term,
    ParsedModule,
    ModuleSummary,
    Settings,
)
from .errors import BridgeError, DecodeError, SettingsError, InstallError
from .version import (
    BUNDLE_MIN_VERSION,
    Compatibility,
    parse_version,
    same_or_newer,
)
from .invoker import ProcessInvoker
from .refs import ref_to_string

__all__ = [
    "SemVer",
    "ProcessStatus",
    "Success",
    "Failure",
    "BinaryNotFound",
    "RunResult",
    "Term",
    "ParsedModule",
    "ModuleSummary",
    "Settings",
    "BridgeError",
    "DecodeError",
    "SettingsError",
    "InstallError",
    "BUNDLE_MIN_VERSION",
    "Compatibility",
    "parse_version",
    "same_or_newer",
    "ProcessInvoker",
    "ref_to_string",
]
