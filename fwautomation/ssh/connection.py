"""SSH connection and command execution against the management appliance."""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

import asyncssh

from fwautomation.utils.errors import CommandError, KeyFileError, SSHConnectionError

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 5
DEFAULT_COMMAND_TIMEOUT = 60

# Reported when the channel closes without an exit status.
EXIT_STATUS_MISSING = -1


@dataclass
class CommandResult:
    """Result of SSH command execution."""

    stdout: str
    stderr: str
    exit_code: int
    exit_signal: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def load_private_key(key_path: str) -> asyncssh.SSHKey:
    """Read and parse a private key file.

    Raises:
        KeyFileError: If the file cannot be read or is not a valid key
    """
    try:
        with open(os.path.expanduser(key_path), "rb") as f:
            data = f.read()
    except OSError as e:
        raise KeyFileError(f"Error reading authentication key: {e}", path=key_path)

    try:
        return asyncssh.import_private_key(data)
    except (asyncssh.KeyImportError, asyncssh.KeyEncryptionError) as e:
        raise KeyFileError(f"Error parsing authentication key: {e}", path=key_path)


class SSHConnection:
    """One blocking-style SSH session to the management appliance.

    Host key verification is disabled; the appliance is addressed by the
    operator-supplied management server name.

    Usage:
        async with SSHConnection(host, 22, "admin", "~/.ssh/fw_key") as ssh:
            output = await ssh.run_checked("show group group=WEB")
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        key_path: str,
        connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
        command_timeout: int = DEFAULT_COMMAND_TIMEOUT,
    ):
        """Initialize SSH connection parameters.

        Args:
            host: Management server hostname or IP
            port: SSH port
            user: SSH username
            key_path: Path to the private key file
            connect_timeout: Dial timeout in seconds
            command_timeout: Command execution timeout in seconds
        """
        self.host = host
        self.port = port
        self.user = user
        self.key_path = key_path
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout
        self._conn: Optional[asyncssh.SSHClientConnection] = None

    async def __aenter__(self) -> "SSHConnection":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self) -> None:
        """Establish SSH connection."""
        key = load_private_key(self.key_path)

        try:
            self._conn = await asyncio.wait_for(
                asyncssh.connect(
                    self.host,
                    port=self.port,
                    username=self.user,
                    client_keys=[key],
                    known_hosts=None,
                ),
                timeout=self.connect_timeout,
            )
            logger.debug(f"SSH connected to {self.user}@{self.host}:{self.port}")
        except asyncio.TimeoutError:
            raise SSHConnectionError(
                f"SSH connection timeout ({self.connect_timeout}s)",
                host=self.host,
                port=self.port,
            )
        except (asyncssh.Error, OSError) as e:
            raise SSHConnectionError(
                f"Error dialing SSH server: {e}",
                host=self.host,
                port=self.port,
            )

    async def close(self) -> None:
        """Close SSH connection."""
        if self._conn:
            self._conn.close()
            await self._conn.wait_closed()
            self._conn = None

    async def run(
        self,
        command: str,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        """Execute a command and wait for it to finish.

        Args:
            command: Command to execute
            timeout: Command timeout (default: self.command_timeout)

        Returns:
            CommandResult with stdout, stderr, exit_code
        """
        if not self._conn:
            raise SSHConnectionError("Not connected", host=self.host, port=self.port)

        timeout = timeout or self.command_timeout

        try:
            result = await asyncio.wait_for(
                self._conn.run(command, check=False),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            raise SSHConnectionError(
                f"Command timeout ({timeout}s): {command[:50]}...",
                host=self.host,
                port=self.port,
            )
        except asyncssh.Error as e:
            raise SSHConnectionError(
                f"Error starting command: {e}",
                host=self.host,
                port=self.port,
            )

        exit_signal = result.exit_signal[0] if result.exit_signal else None
        return CommandResult(
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            exit_code=(
                result.exit_status
                if result.exit_status is not None
                else EXIT_STATUS_MISSING
            ),
            exit_signal=exit_signal,
        )

    async def run_checked(
        self,
        command: str,
        timeout: Optional[int] = None,
    ) -> str:
        """Execute a command and raise on non-zero exit.

        Returns:
            Command stdout

        Raises:
            CommandError: On non-zero or missing exit status
        """
        result = await self.run(command, timeout)
        if not result.success:
            if result.exit_code == EXIT_STATUS_MISSING:
                status = f"no exit status, signal {result.exit_signal or 'none'}"
            else:
                status = f"exit {result.exit_code}"
            raise CommandError(
                f"Error running command ({status}): "
                f"stderr: {result.stderr.strip()}, stdout: {result.stdout.strip()}",
                command=command,
                exit_code=result.exit_code,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result.stdout
