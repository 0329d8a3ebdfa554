"""Utility modules for fwautomation."""

from .errors import (
    FWAutomationError,
    ConfigurationError,
    KeyFileError,
    SSHConnectionError,
    CommandError,
    ResponseParseError,
    UnsupportedMethodError,
    GroupOperationError,
)

__all__ = [
    "FWAutomationError",
    "ConfigurationError",
    "KeyFileError",
    "SSHConnectionError",
    "CommandError",
    "ResponseParseError",
    "UnsupportedMethodError",
    "GroupOperationError",
]
