"""Abstract base classes for the collaborators the core depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ResourceCounter(ABC):
    """Counts live resources in the external store.

    Implementations may block on network I/O and may raise any exception on
    transport failure; the usage aggregator converts those to
    ``UsageFetchError``.
    """

    @abstractmethod
    async def count_organizations(self, principal_id: str) -> int:
        """Active organizations the principal belongs to."""
        ...

    @abstractmethod
    async def count_branches(self, organization_id: str) -> int:
        """Branches owned by the organization."""
        ...

    @abstractmethod
    async def count_staff(self, organization_id: str) -> int:
        """Staff (employees) owned by the organization."""
        ...
