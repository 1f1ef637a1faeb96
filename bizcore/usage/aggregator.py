"""Usage aggregation — live resource counts for entitlement checks.

Two scopes are combined on purpose: ``businesses`` counts every active
organization the acting principal belongs to, while ``branches`` and
``staff`` count only inside the current organization.
"""

from __future__ import annotations

import asyncio
import itertools

from bizcore.core.constants import DEFAULT_USAGE_FETCH_TIMEOUT
from bizcore.core.exceptions import UsageFetchError
from bizcore.core.interfaces import ResourceCounter
from bizcore.core.logging import get_logger
from bizcore.core.types import Usage

log = get_logger(__name__)


def _cancel_requested() -> bool:
    """True if the calling task itself is being cancelled."""
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class UsageAggregator:
    """Collects a ``Usage`` snapshot from a ``ResourceCounter``.

    Failures never degrade to a zero snapshot: any counter error or timeout
    raises ``UsageFetchError`` so callers can hold back admission decisions.
    """

    def __init__(
        self,
        counter: ResourceCounter,
        timeout_seconds: float = DEFAULT_USAGE_FETCH_TIMEOUT,
    ) -> None:
        self._counter = counter
        self._timeout = timeout_seconds

    async def fetch(self, principal_id: str, organization_id: str) -> Usage:
        """Count the three resources concurrently and return a snapshot.

        If any count fails or the timeout expires, the remaining counts are
        cancelled before ``UsageFetchError`` is raised.
        """
        try:
            async with asyncio.timeout(self._timeout):
                async with asyncio.TaskGroup() as tg:
                    businesses = tg.create_task(self._counter.count_organizations(principal_id))
                    branches = tg.create_task(self._counter.count_branches(organization_id))
                    staff = tg.create_task(self._counter.count_staff(organization_id))
        except TimeoutError as exc:
            log.warning(
                "usage_fetch_timeout",
                principal_id=principal_id,
                organization_id=organization_id,
                timeout_s=self._timeout,
            )
            msg = f"usage fetch timed out after {self._timeout}s"
            raise UsageFetchError(
                msg,
                context={"organization_id": organization_id, "principal_id": principal_id},
            ) from exc
        except Exception as exc:
            cause = exc.exceptions[0] if isinstance(exc, ExceptionGroup) else exc
            log.warning(
                "usage_fetch_failed",
                principal_id=principal_id,
                organization_id=organization_id,
                error=str(cause),
            )
            msg = "usage fetch failed"
            raise UsageFetchError(
                msg,
                context={
                    "organization_id": organization_id,
                    "principal_id": principal_id,
                    "error": str(cause),
                },
            ) from cause

        usage = Usage(
            businesses=businesses.result(),
            branches=branches.result(),
            staff=staff.result(),
        )
        log.debug(
            "usage_fetched",
            organization_id=organization_id,
            **usage.to_dict(),
        )
        return usage


class UsageRefresher:
    """Last-request-wins fetching per ``(principal, organization)`` pair.

    A new ``refresh()`` for a pair cancels the fetch still in flight for that
    same pair; the superseded caller gets ``None``. Different principals
    viewing one organization get separate snapshots, since ``businesses``
    is counted per principal.
    """

    def __init__(self, aggregator: UsageAggregator) -> None:
        self._aggregator = aggregator
        self._tokens = itertools.count()
        self._latest: dict[tuple[str, str], int] = {}
        self._inflight: dict[tuple[str, str], asyncio.Task[Usage]] = {}

    async def refresh(self, principal_id: str, organization_id: str) -> Usage | None:
        """Fetch fresh usage; None means this request was superseded or cancelled.

        Raises ``UsageFetchError`` if the winning fetch fails.
        """
        key = (principal_id, organization_id)
        previous = self._inflight.get(key)
        if previous is not None and not previous.done():
            previous.cancel()
            log.debug(
                "usage_fetch_superseded",
                principal_id=principal_id,
                organization_id=organization_id,
            )

        token = next(self._tokens)
        self._latest[key] = token
        task = asyncio.create_task(
            self._aggregator.fetch(principal_id, organization_id),
            name=f"usage_{principal_id}_{organization_id}",
        )
        self._inflight[key] = task

        try:
            usage = await task
        except (asyncio.CancelledError, UsageFetchError):
            if self._latest.get(key) != token and not _cancel_requested():
                return None
            raise
        else:
            if self._latest.get(key) != token:
                return None
            return usage
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]
            if self._latest.get(key) == token:
                del self._latest[key]

    def in_flight(self, principal_id: str, organization_id: str) -> bool:
        task = self._inflight.get((principal_id, organization_id))
        return task is not None and not task.done()

    def pending(self) -> int:
        """Number of refreshes still awaiting a result."""
        return len(self._latest)

    def cancel(self, principal_id: str, organization_id: str) -> bool:
        """Cancel the pending fetch for one pair (scope torn down)."""
        key = (principal_id, organization_id)
        self._latest.pop(key, None)
        task = self._inflight.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        log.debug(
            "usage_fetch_cancelled",
            principal_id=principal_id,
            organization_id=organization_id,
        )
        return True

    async def close(self) -> None:
        """Cancel every pending fetch and wait for them to unwind."""
        tasks = list(self._inflight.values())
        self._inflight.clear()
        self._latest.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            log.info("usage_refresher_closed", cancelled=len(tasks))
