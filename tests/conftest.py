"""Shared fixtures: a scripted stand-in for the management server."""

import json
from typing import List, Optional

import pytest

from fwautomation.plugin import build_provider
from fwautomation.resources import firewall_group
from fwautomation.utils.errors import FWAutomationError


class FakeAppliance:
    """Records commands and answers them from a reply queue.

    Unqueued commands are answered with a success reply.
    """

    def __init__(self):
        self.commands: List[str] = []
        self.connections: List[dict] = []
        self.replies: List[str] = []
        self.error: Optional[FWAutomationError] = None

    def reply(self, status: str = "success", reason: str = "") -> None:
        self.replies.append(json.dumps({"status": status, "reason": reason}))

    def reply_raw(self, output: str) -> None:
        self.replies.append(output)

    def fail_with(self, error: FWAutomationError) -> None:
        self.error = error

    def connection_class(self):
        appliance = self

        class FakeSSHConnection:
            def __init__(self, host, port, user, key_path, connect_timeout=5, command_timeout=60):
                appliance.connections.append(
                    {
                        "host": host,
                        "port": port,
                        "user": user,
                        "key_path": key_path,
                        "connect_timeout": connect_timeout,
                    }
                )

            async def __aenter__(self):
                if appliance.error is not None:
                    raise appliance.error
                return self

            async def __aexit__(self, exc_type, exc_val, exc_tb):
                return None

            async def run_checked(self, command, timeout=None):
                appliance.commands.append(command)
                if appliance.replies:
                    return appliance.replies.pop(0)
                return json.dumps({"status": "success", "reason": ""})

        return FakeSSHConnection


@pytest.fixture
def appliance(monkeypatch):
    fake = FakeAppliance()
    monkeypatch.setattr(firewall_group, "SSHConnection", fake.connection_class())
    return fake


@pytest.fixture
def provider_config(tmp_path):
    return {
        "management_server": "mgmt.example.com",
        "domain": "corp",
        "authentication_key_path": str(tmp_path / "id_ed25519"),
    }


@pytest.fixture
def provider(provider_config, monkeypatch):
    for var in ("FWGROUPS_USERNAME", "FWGROUPS_PORT", "FWGROUPS_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    p = build_provider()
    diags = p.configure_provider(provider_config)
    assert not diags.has_error(), diags
    return p


@pytest.fixture
def planned():
    return {
        "group_name": "WEB_SERVERS",
        "hostname": "web.example.com",
        "ip_address": "10.0.0.5",
    }
