"""Client library for switches managed through the HRUI web interface."""

__version__ = "0.1.0"

__all__ = ["client", "fwd", "info", "ip", "loop", "mac", "parsing", "port", "qos", "stp", "vlan"]