"""Multi-tenant identity and access-control service."""

__version__ = "1.0.0"
