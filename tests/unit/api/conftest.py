"""Fixtures for API unit tests."""

from collections.abc import Callable
from typing import Any

import pytest

from src.api.sending.context import ResponseContext

from tests.unit.api.doubles import (
    RecordingSerializer,
    RecordingTransport,
    StubLinkGenerator,
    empty_receive,
    make_scope,
)


@pytest.fixture
def transport() -> RecordingTransport:
    """Provide a recording ASGI transport."""
    return RecordingTransport()


@pytest.fixture
def serializer() -> RecordingSerializer:
    """Provide a recording serializer."""
    return RecordingSerializer()


@pytest.fixture
def link_generator() -> StubLinkGenerator:
    """Provide a stub link generator."""
    return StubLinkGenerator()


@pytest.fixture
def context_factory(
    transport: RecordingTransport,
) -> Callable[..., ResponseContext]:
    """Factory for response contexts writing to the recording transport."""

    def _create(**kwargs: Any) -> ResponseContext:  # noqa: ANN401
        scope = make_scope(
            path=kwargs.pop("path", "/"),
            method=kwargs.pop("method", "GET"),
            router=kwargs.pop("router", None),
        )
        send = kwargs.pop("send", transport)
        return ResponseContext(scope, empty_receive, send, **kwargs)

    return _create


@pytest.fixture
def ctx(context_factory: Callable[..., ResponseContext]) -> ResponseContext:
    """Provide a response context without a link generator."""
    return context_factory()
