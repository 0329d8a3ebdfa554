"""Provider definition: configuration schema plus the resources it manages."""

from fwautomation.provider.config import PROVIDER_SCHEMA, provider_configure
from fwautomation.provider.schema import Provider
from fwautomation.resources.firewall_group import RESOURCE_TYPE, firewall_group_resource


def build_provider() -> Provider:
    """Create an unconfigured provider instance."""
    return Provider(
        schema=PROVIDER_SCHEMA,
        resources_map={
            RESOURCE_TYPE: firewall_group_resource(),
        },
        configure=provider_configure,
    )
