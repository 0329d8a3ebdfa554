"""Provider configuration.

Values are read from the provider block first and fall back to:
- FWGROUPS_SERVER         management_server
- FWGROUPS_DOMAIN         domain
- FWGROUPS_AUTH_KEY_PATH  authentication_key_path
- FWGROUPS_USERNAME       username (optional)
- FWGROUPS_PORT           port (optional)
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from fwautomation.provider.schema import Schema, ValueType, env_default
from fwautomation.ssh.connection import DEFAULT_CONNECT_TIMEOUT
from fwautomation.utils.errors import ConfigurationError

DEFAULT_USERNAME = "admin"
DEFAULT_PORT = 22


class ManagementConfig(BaseModel):
    """Connection details for the management server.

    Created once per provider configuration and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    server: str = Field(..., min_length=1, description="Management server address")
    domain: str = Field(..., min_length=1, description="Management domain")
    authentication_key_path: str = Field(
        ..., min_length=1, description="Path to the SSH private key"
    )
    username: str = Field(DEFAULT_USERNAME, min_length=1, description="SSH username")
    port: int = Field(DEFAULT_PORT, ge=1, le=65535, description="SSH port")
    connect_timeout: int = Field(
        DEFAULT_CONNECT_TIMEOUT, ge=1, description="Dial timeout in seconds"
    )


PROVIDER_SCHEMA: Dict[str, Schema] = {
    "management_server": Schema(
        type=ValueType.STRING,
        required=True,
        description="SSH-reachable management server that owns firewall groups",
        default_func=env_default("FWGROUPS_SERVER"),
    ),
    "domain": Schema(
        type=ValueType.STRING,
        required=True,
        description="Management domain",
        default_func=env_default("FWGROUPS_DOMAIN"),
    ),
    "authentication_key_path": Schema(
        type=ValueType.STRING,
        required=True,
        description="Path to the SSH private key used for public-key auth",
        default_func=env_default("FWGROUPS_AUTH_KEY_PATH"),
        sensitive=True,
    ),
    "username": Schema(
        type=ValueType.STRING,
        description="SSH username",
        default=DEFAULT_USERNAME,
        default_func=env_default("FWGROUPS_USERNAME"),
    ),
    "port": Schema(
        type=ValueType.INT,
        description="SSH port",
        default=DEFAULT_PORT,
        default_func=env_default("FWGROUPS_PORT"),
    ),
}


def provider_configure(values: Dict[str, Any]) -> ManagementConfig:
    """Build the configuration object handed to every resource operation.

    Returns a configuration, not an SSH client; each operation dials its own
    session.

    Raises:
        ConfigurationError: If a value is out of range
    """
    try:
        return ManagementConfig(
            server=values.get("management_server", ""),
            domain=values.get("domain", ""),
            authentication_key_path=values.get("authentication_key_path", ""),
            username=values.get("username", DEFAULT_USERNAME),
            port=values.get("port", DEFAULT_PORT),
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ConfigurationError(
            f"Invalid provider configuration: {field}: {first.get('msg')}",
            field=field or None,
        )
