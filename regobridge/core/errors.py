"""
Exceptions raised by the OPA bridge.
"""


class BridgeError(Exception):
    """Base class for all bridge errors."""
    pass


class DecodeError(BridgeError):
    """Raised when a successful run produced output that cannot be decoded."""

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output


class SettingsError(BridgeError):
    """Raised when bridge settings cannot be loaded."""
    pass


class InstallError(BridgeError):
    """Raised when downloading the opa binary fails."""
    pass
