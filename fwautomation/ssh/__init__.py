"""SSH connection and command execution."""

from .connection import SSHConnection, CommandResult, load_private_key

__all__ = ["SSHConnection", "CommandResult", "load_private_key"]
