"""fwautomation - manage firewall groups on a management appliance over SSH."""

__version__ = "0.1.0"
