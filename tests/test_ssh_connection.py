"""Tests for SSH key loading and command result handling."""

import asyncio

import asyncssh
import pytest
from fwautomation.ssh import SSHConnection, CommandResult, load_private_key
from fwautomation.ssh.connection import EXIT_STATUS_MISSING
from fwautomation.utils.errors import CommandError, KeyFileError, SSHConnectionError


class FakeProcess:
    def __init__(self, stdout, stderr, exit_status, exit_signal=None):
        self.stdout = stdout
        self.stderr = stderr
        self.exit_status = exit_status
        self.exit_signal = exit_signal


class FakeConn:
    def __init__(self, process):
        self.process = process
        self.commands = []

    async def run(self, command, check=False):
        self.commands.append(command)
        return self.process


def _connected(process):
    ssh = SSHConnection("mgmt.example.com", 22, "admin", "/unused")
    ssh._conn = FakeConn(process)
    return ssh


class TestLoadPrivateKey:
    """Tests for load_private_key."""

    def test_loads_openssh_key(self, tmp_path):
        key = asyncssh.generate_private_key("ssh-ed25519")
        path = tmp_path / "id_ed25519"
        path.write_bytes(key.export_private_key())
        loaded = load_private_key(str(path))
        assert loaded.get_algorithm() == "ssh-ed25519"

    def test_expands_home_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        key = asyncssh.generate_private_key("ssh-ed25519")
        (tmp_path / "fw_key").write_bytes(key.export_private_key())
        loaded = load_private_key("~/fw_key")
        assert loaded.get_algorithm() == "ssh-ed25519"

    def test_missing_file(self, tmp_path):
        path = str(tmp_path / "missing")
        with pytest.raises(KeyFileError) as exc_info:
            load_private_key(path)
        assert exc_info.value.path == path
        assert "Error reading authentication key" in str(exc_info.value)

    def test_unparseable_key(self, tmp_path):
        path = tmp_path / "garbage"
        path.write_text("not a key")
        with pytest.raises(KeyFileError) as exc_info:
            load_private_key(str(path))
        assert "Error parsing authentication key" in str(exc_info.value)


class TestCommandResult:
    """Tests for CommandResult."""

    def test_success(self):
        assert CommandResult(stdout="", stderr="", exit_code=0).success
        assert not CommandResult(stdout="", stderr="", exit_code=1).success


class TestRun:
    """Tests for SSHConnection.run / run_checked."""

    def test_not_connected(self):
        ssh = SSHConnection("mgmt.example.com", 22, "admin", "/unused")
        with pytest.raises(SSHConnectionError):
            asyncio.run(ssh.run("show group group=WEB"))

    def test_run_checked_returns_stdout(self):
        ssh = _connected(FakeProcess('{"status": "success"}', "", 0))
        output = asyncio.run(ssh.run_checked("show group group=WEB"))
        assert output == '{"status": "success"}'
        assert ssh._conn.commands == ["show group group=WEB"]

    def test_run_checked_non_zero_exit(self):
        ssh = _connected(FakeProcess("partial", "no such group", 3))
        with pytest.raises(CommandError) as exc_info:
            asyncio.run(ssh.run_checked("show group group=WEB"))
        error = exc_info.value
        assert error.exit_code == 3
        assert "stderr: no such group" in str(error)
        assert "stdout: partial" in str(error)

    def test_missing_streams_become_empty(self):
        ssh = _connected(FakeProcess(None, None, 0))
        result = asyncio.run(ssh.run("true"))
        assert result == CommandResult(stdout="", stderr="", exit_code=0)

    def test_missing_exit_status_is_failure(self):
        ssh = _connected(
            FakeProcess('{"status": "success"}', "", None, ("KILL", False, "", ""))
        )
        result = asyncio.run(ssh.run("show group group=WEB"))
        assert result.exit_code == EXIT_STATUS_MISSING
        assert result.exit_signal == "KILL"
        assert not result.success

        with pytest.raises(CommandError) as exc_info:
            asyncio.run(ssh.run_checked("show group group=WEB"))
        assert "no exit status, signal KILL" in str(exc_info.value)

    def test_dropped_channel_without_signal(self):
        ssh = _connected(FakeProcess("", "", None))
        with pytest.raises(CommandError) as exc_info:
            asyncio.run(ssh.run_checked("show group group=WEB"))
        assert exc_info.value.exit_code == EXIT_STATUS_MISSING
        assert "signal none" in str(exc_info.value)

    def test_connect_with_bad_key_fails_before_dialing(self, tmp_path):
        ssh = SSHConnection("mgmt.example.com", 22, "admin", str(tmp_path / "missing"))
        with pytest.raises(KeyFileError):
            asyncio.run(ssh.connect())
