"""Tests for SqlResourceCounter — count queries against a mocked engine."""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import pytest

from bizcore.core.exceptions import UsageFetchError
from bizcore.usage.aggregator import UsageAggregator
from bizcore.usage.counters import SqlResourceCounter


def _mock_engine(mock_conn: AsyncMock) -> MagicMock:
    """Create a mock engine with proper async context manager for begin()."""
    engine = MagicMock()

    @asynccontextmanager
    async def _begin() -> AsyncIterator[AsyncMock]:
        yield mock_conn

    engine.begin = _begin
    return engine


def _conn_returning(value: object) -> AsyncMock:
    mock_result = MagicMock()
    mock_result.scalar.return_value = value
    mock_conn = AsyncMock()
    mock_conn.execute.return_value = mock_result
    return mock_conn


class TestSqlResourceCounter:
    @pytest.mark.asyncio
    async def test_count_organizations_by_principal(self) -> None:
        conn = _conn_returning(2)
        counter = SqlResourceCounter(_mock_engine(conn))
        assert await counter.count_organizations("user-1") == 2

        statement, params = conn.execute.call_args.args
        assert params == {"pid": "user-1"}
        sql = str(statement)
        assert "organization_memberships" in sql
        assert "is_active" in sql

    @pytest.mark.asyncio
    async def test_count_branches_by_organization(self) -> None:
        conn = _conn_returning(5)
        counter = SqlResourceCounter(_mock_engine(conn))
        assert await counter.count_branches("org-1") == 5

        statement, params = conn.execute.call_args.args
        assert params == {"oid": "org-1"}
        assert "FROM branches" in str(statement)

    @pytest.mark.asyncio
    async def test_count_staff_by_organization(self) -> None:
        conn = _conn_returning(12)
        counter = SqlResourceCounter(_mock_engine(conn))
        assert await counter.count_staff("org-1") == 12

        statement, _ = conn.execute.call_args.args
        assert "FROM employees" in str(statement)

    @pytest.mark.asyncio
    async def test_null_count_is_zero(self) -> None:
        counter = SqlResourceCounter(_mock_engine(_conn_returning(None)))
        assert await counter.count_branches("org-1") == 0

    @pytest.mark.asyncio
    async def test_database_error_surfaces_as_fetch_error(self) -> None:
        conn = AsyncMock()
        conn.execute.side_effect = OSError("connection refused")
        aggregator = UsageAggregator(SqlResourceCounter(_mock_engine(conn)))
        with pytest.raises(UsageFetchError):
            await aggregator.fetch("user-1", "org-1")
