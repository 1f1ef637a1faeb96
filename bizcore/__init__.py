"""BIZCORE — plan entitlements and sector feature resolution for multi-tenant businesses."""

__version__ = "0.1.0"
