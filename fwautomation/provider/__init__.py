"""Provider schema, configuration and lifecycle dispatch."""

from .schema import (
    Diagnostic,
    Diagnostics,
    Provider,
    Resource,
    ResourceData,
    Schema,
    Severity,
    ValueType,
    env_default,
)
from .config import ManagementConfig, provider_configure

__all__ = [
    "Diagnostic",
    "Diagnostics",
    "Provider",
    "Resource",
    "ResourceData",
    "Schema",
    "Severity",
    "ValueType",
    "env_default",
    "ManagementConfig",
    "provider_configure",
]
