"""Logging setup and operation records."""

from .logger import OperationLog, setup_logging

__all__ = [
    "OperationLog",
    "setup_logging",
]
