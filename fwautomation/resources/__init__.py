"""Managed resource types."""

from .firewall_group import (
    RESOURCE_TYPE,
    FirewallResponse,
    firewall_group_resource,
    generate_command,
)

__all__ = [
    "RESOURCE_TYPE",
    "FirewallResponse",
    "firewall_group_resource",
    "generate_command",
]
