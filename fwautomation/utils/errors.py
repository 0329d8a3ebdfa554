"""Error hierarchy for fwautomation.

Every error is fatal to the operation that raised it; none are retried.
The resource layer turns them into a single error diagnostic.
"""

from typing import Optional


class FWAutomationError(Exception):
    """Base exception for all fwautomation errors."""

    pass


class ConfigurationError(FWAutomationError):
    """Raised when provider configuration is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class KeyFileError(FWAutomationError):
    """Raised when the authentication key cannot be read or parsed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class SSHConnectionError(FWAutomationError):
    """Raised when SSH connection fails."""

    def __init__(
        self,
        message: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ):
        super().__init__(message)
        self.host = host
        self.port = port


class CommandError(FWAutomationError):
    """Raised when a remote command exits non-zero."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class ResponseParseError(FWAutomationError):
    """Raised when the appliance reply is not the expected JSON."""

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output


class UnsupportedMethodError(FWAutomationError):
    """Raised for a group method other than add, remove or read."""

    def __init__(self, method: str):
        super().__init__(f"Unsupported firewall group method: {method!r}")
        self.method = method


class GroupOperationError(FWAutomationError):
    """Raised when the appliance reports a non-success status."""

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.resource_id = resource_id
        self.reason = reason
