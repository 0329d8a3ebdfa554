"""Resource fwautomation_fwgroup: a hostname/IP entry in a firewall group.

Each operation runs exactly one command on the management server:
- create: modify group group=<NAME> hostname=<HOST> ip=<IP> method=add
- read:   show group group=<NAME>
- delete: modify group group=<NAME> hostname=<HOST> ip=<IP> method=remove

The server replies with {"status": "...", "reason": "..."} on stdout.
"""

import json
import logging
import re
import uuid
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from fwautomation.diagnostics import OperationLog
from fwautomation.provider.config import ManagementConfig
from fwautomation.provider.schema import (
    Diagnostics,
    Resource,
    ResourceData,
    Schema,
    ValueType,
)
from fwautomation.ssh import SSHConnection
from fwautomation.utils.errors import (
    FWAutomationError,
    GroupOperationError,
    ResponseParseError,
    UnsupportedMethodError,
)

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "fwautomation_fwgroup"

METHOD_ADD = "add"
METHOD_REMOVE = "remove"
METHOD_READ = "read"

STATUS_SUCCESS = "success"

GROUP_NAME_PATTERN = re.compile(r"[A-Z_]+")
HOSTNAME_PATTERN = re.compile(r"[a-z.-]+")
IP_ADDRESS_PATTERN = re.compile(r"([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})")


class FirewallResponse(BaseModel):
    """Reply printed by the management server's group commands."""

    status: str = Field("", description="success, or an error keyword")
    reason: str = Field("", description="Human-readable detail")

    @property
    def success(self) -> bool:
        return self.status == STATUS_SUCCESS


def validate_group_name(value: Any, key: str) -> Tuple[List[str], List[str]]:
    if not isinstance(value, str) or not GROUP_NAME_PATTERN.fullmatch(value):
        return [], [
            f'"{key}" includes invalid characters. '
            "May contain [uppercase letters, underscores]."
        ]
    return [], []


def validate_hostname(value: Any, key: str) -> Tuple[List[str], List[str]]:
    if not isinstance(value, str) or not HOSTNAME_PATTERN.fullmatch(value):
        return [], [
            f'"{key}" must be a fully qualified domain name. '
            "May contain [letters, hyphens, periods]."
        ]
    return [], []


def validate_ip_address(value: Any, key: str) -> Tuple[List[str], List[str]]:
    match = IP_ADDRESS_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if not match or any(int(octet) > 255 for octet in match.groups()):
        return [], [f'"{key}" must be a dotted-quad IPv4 address.']
    return [], []


FIREWALL_GROUP_SCHEMA = {
    "group_name": Schema(
        type=ValueType.STRING,
        required=True,
        force_new=True,
        description="Firewall group name",
        validate_func=validate_group_name,
    ),
    "hostname": Schema(
        type=ValueType.STRING,
        required=True,
        force_new=True,
        description="Fully qualified hostname of the member",
        validate_func=validate_hostname,
    ),
    "ip_address": Schema(
        type=ValueType.STRING,
        required=True,
        force_new=True,
        description="IPv4 address of the member",
        validate_func=validate_ip_address,
    ),
}


def get_value(data: ResourceData, key: str, method: str) -> str:
    """Get an attribute for a command; removals target the prior value."""
    if method == METHOD_REMOVE and data.has_change(key):
        old, _ = data.get_change(key)
        return old
    return data.get(key)


def generate_command(data: ResourceData, method: str) -> str:
    """Build the appliance command for one group operation.

    Raises:
        UnsupportedMethodError: For anything but add, remove or read
    """
    group_name = get_value(data, "group_name", method)

    if method == METHOD_READ:
        return f"show group group={group_name}"

    if method not in (METHOD_ADD, METHOD_REMOVE):
        raise UnsupportedMethodError(method)

    hostname = get_value(data, "hostname", method)
    ip_address = get_value(data, "ip_address", method)
    return (
        f"modify group group={group_name} hostname={hostname} "
        f"ip={ip_address} method={method}"
    )


def parse_response(output: str) -> FirewallResponse:
    """Parse the JSON reply.

    Raises:
        ResponseParseError: If stdout is not a JSON object
    """
    try:
        payload = json.loads(output)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Error parsing JSON response: {e}", output=output)

    if not isinstance(payload, dict):
        raise ResponseParseError(
            f"Error parsing JSON response: expected object, got {type(payload).__name__}",
            output=output,
        )

    try:
        return FirewallResponse(**payload)
    except ValidationError as e:
        raise ResponseParseError(f"Error parsing JSON response: {e}", output=output)


async def run_firewall_group_task(
    config: ManagementConfig,
    data: ResourceData,
    method: str,
) -> FirewallResponse:
    """Run one group command over a fresh SSH session.

    Raises:
        FWAutomationError: On key, transport, exit status or parse failure
    """
    command = generate_command(data, method)
    logger.debug(f"Running on {config.server} (domain {config.domain}): {command}")

    async with SSHConnection(
        config.server,
        config.port,
        config.username,
        config.authentication_key_path,
        connect_timeout=config.connect_timeout,
    ) as ssh:
        output = await ssh.run_checked(command)

    return parse_response(output)


def _check_status(
    action: str,
    response: FirewallResponse,
    label: str,
    resource_id: Optional[str] = None,
) -> None:
    if not response.success:
        raise GroupOperationError(
            f"Failed to {action} firewall group {label}: {response.reason}",
            resource_id=resource_id,
            reason=response.reason,
        )


async def create_firewall_group(data: ResourceData, meta: ManagementConfig) -> Diagnostics:
    oplog = OperationLog()
    try:
        response = await run_firewall_group_task(meta, data, METHOD_ADD)
        oplog.info("create status", status=response.status, reason=response.reason)
        _check_status("create", response, data.get("group_name"))
    except FWAutomationError as e:
        oplog.error("create failed", error=str(e))
        return Diagnostics.from_error(e)

    data.set_id(str(uuid.uuid4()))
    return Diagnostics()


async def read_firewall_group(data: ResourceData, meta: ManagementConfig) -> Diagnostics:
    oplog = OperationLog(resource_id=data.id)
    try:
        response = await run_firewall_group_task(meta, data, METHOD_READ)
        oplog.info("read status", status=response.status, reason=response.reason)
        _check_status("read", response, data.id, resource_id=data.id)
    except FWAutomationError as e:
        oplog.error("read failed", error=str(e))
        return Diagnostics.from_error(e)

    return Diagnostics()


async def update_firewall_group(data: ResourceData, meta: ManagementConfig) -> Diagnostics:
    # Every attribute is force-new, so an in-place update only refreshes.
    return await read_firewall_group(data, meta)


async def delete_firewall_group(data: ResourceData, meta: ManagementConfig) -> Diagnostics:
    oplog = OperationLog(resource_id=data.id)
    try:
        response = await run_firewall_group_task(meta, data, METHOD_REMOVE)
        oplog.info("delete status", status=response.status, reason=response.reason)
        _check_status("delete", response, data.id, resource_id=data.id)
    except FWAutomationError as e:
        oplog.error("delete failed", error=str(e))
        return Diagnostics.from_error(e)

    data.set_id("")
    return Diagnostics()


def firewall_group_resource() -> Resource:
    return Resource(
        schema=FIREWALL_GROUP_SCHEMA,
        create=create_firewall_group,
        read=read_firewall_group,
        update=update_firewall_group,
        delete=delete_firewall_group,
        schema_version=1,
        description="Membership of a hostname/IP pair in a firewall group",
    )
