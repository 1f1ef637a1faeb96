"""Custom exception hierarchy for BIZCORE."""

from __future__ import annotations

from typing import Any


class BizcoreError(Exception):
    """Base exception for all BIZCORE errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = context or {}


# ── Catalogs ─────────────────────────────────────────────────────

class CatalogError(BizcoreError):
    """A static plan or sector table is malformed or not exhaustive."""


# ── Usage ────────────────────────────────────────────────────────

class UsageFetchError(BizcoreError):
    """Live resource counts could not be obtained (store down, timeout, bad row)."""


# ── Organizations ────────────────────────────────────────────────

class OrganizationNotFoundError(BizcoreError):
    """No organization exists for the requested identifier."""
