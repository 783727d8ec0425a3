"""Unit tests for src/core/context.py."""

import asyncio
import uuid

import pytest

from src.core.context import (
    RequestContext,
    generate_correlation_id,
    generate_request_id,
)


@pytest.mark.unit
class TestRequestContext:
    """Test suite for RequestContext."""

    def test_correlation_id_round_trip(self) -> None:
        """Test a stored correlation ID is returned."""
        RequestContext.set_correlation_id("corr-1")

        assert RequestContext.get_correlation_id() == "corr-1"

    def test_endpoint_name_round_trip(self) -> None:
        """Test a stored endpoint name is returned."""
        RequestContext.set_endpoint_name("GetUser")

        assert RequestContext.get_endpoint_name() == "GetUser"

    def test_defaults_are_none(self) -> None:
        """Test nothing is set by default."""
        assert RequestContext.get_correlation_id() is None
        assert RequestContext.get_endpoint_name() is None

    def test_clear_removes_everything(self) -> None:
        """Test clear() resets both values."""
        RequestContext.set_correlation_id("corr-1")
        RequestContext.set_endpoint_name("GetUser")

        RequestContext.clear()

        assert RequestContext.get_correlation_id() is None
        assert RequestContext.get_endpoint_name() is None

    async def test_child_task_changes_do_not_leak_to_parent(self) -> None:
        """Test context set in a child task stays in that task."""
        RequestContext.set_endpoint_name("parent")

        async def child() -> str | None:
            RequestContext.set_endpoint_name("child")
            return RequestContext.get_endpoint_name()

        assert await asyncio.create_task(child()) == "child"
        assert RequestContext.get_endpoint_name() == "parent"


@pytest.mark.unit
class TestIdGenerators:
    """Test suite for ID generators."""

    def test_correlation_id_is_uuid4(self) -> None:
        """Test correlation IDs are UUID4 strings."""
        assert uuid.UUID(generate_correlation_id()).version == 4

    def test_request_id_has_prefix(self) -> None:
        """Test request IDs are prefixed UUID4 strings."""
        request_id = generate_request_id()

        assert request_id.startswith("req-")
        assert uuid.UUID(request_id.removeprefix("req-")).version == 4

    def test_ids_are_unique(self) -> None:
        """Test generated IDs do not repeat."""
        assert len({generate_request_id() for _ in range(100)}) == 100
