"""Tests for error hierarchy."""

import pytest
from fwautomation.provider.schema import Diagnostics, Severity
from fwautomation.utils.errors import (
    FWAutomationError,
    ConfigurationError,
    KeyFileError,
    SSHConnectionError,
    CommandError,
    ResponseParseError,
    UnsupportedMethodError,
    GroupOperationError,
)


class TestErrorHierarchy:
    """Tests for error class hierarchy."""

    def test_all_errors_inherit_from_base(self):
        """All errors should inherit from FWAutomationError."""
        errors = [
            ConfigurationError("test"),
            KeyFileError("test"),
            SSHConnectionError("test"),
            CommandError("test"),
            ResponseParseError("test"),
            UnsupportedMethodError("test"),
            GroupOperationError("test"),
        ]
        for error in errors:
            assert isinstance(error, FWAutomationError)


class TestSSHConnectionError:
    """Tests for SSHConnectionError."""

    def test_captures_connection_details(self):
        """Should capture host and port."""
        error = SSHConnectionError(
            "Connection refused",
            host="192.168.1.100",
            port=22,
        )
        assert error.host == "192.168.1.100"
        assert error.port == 22


class TestCommandError:
    """Tests for CommandError."""

    def test_captures_output(self):
        """Should capture exit code and both streams."""
        error = CommandError(
            "Error running command",
            command="show group group=WEB",
            exit_code=1,
            stdout="",
            stderr="unknown group",
        )
        assert error.exit_code == 1
        assert error.stderr == "unknown group"
        assert error.command == "show group group=WEB"


class TestUnsupportedMethodError:
    """Tests for UnsupportedMethodError."""

    def test_message(self):
        """Should name the method."""
        error = UnsupportedMethodError("rename")
        assert error.method == "rename"
        assert "'rename'" in str(error)


class TestGroupOperationError:
    """Tests for GroupOperationError."""

    def test_captures_reason(self):
        """Should capture resource ID and reason."""
        error = GroupOperationError("Failed", resource_id="abc", reason="not found")
        assert error.resource_id == "abc"
        assert error.reason == "not found"


class TestDiagnosticsFromError:
    """Tests for wrapping errors as diagnostics."""

    @pytest.mark.parametrize(
        "error",
        [KeyFileError("Error parsing authentication key: bad"), SSHConnectionError("dial failed")],
    )
    def test_single_error_diagnostic(self, error):
        diags = Diagnostics.from_error(error)
        assert len(diags) == 1
        assert diags[0].severity == Severity.ERROR
        assert diags[0].summary == str(error)
        assert diags.has_error()

    def test_warnings_are_not_errors(self):
        diags = Diagnostics()
        diags.add_warning("deprecated")
        assert not diags.has_error()
