"""LeaseDesk - leased vehicle inventory import and catalog service."""

__version__ = "0.4.0"
