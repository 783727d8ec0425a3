"""Unit tests for src/api/sending/interceptor.py."""

from collections.abc import Sequence
from typing import Any

import msgpack
import pytest

from src.api.schemas.validation import ValidationFailure
from src.api.sending.context import ResponseContext
from src.api.sending.dispatcher import ResponseDispatcher
from src.api.sending.interceptor import send_intercepted
from src.api.utils.responses import MessagePackResponse
from src.core.cancellation import CancellationToken
from src.core.exceptions import ConfigurationError

from tests.unit.api.doubles import RecordingSerializer, RecordingTransport


class RecordingInterceptor:
    """Interceptor double that optionally writes its own response."""

    def __init__(self, *, respond: bool) -> None:
        self.respond = respond
        self.calls: list[tuple[Any, int, Sequence[ValidationFailure], CancellationToken]] = []

    async def __call__(
        self,
        response: Any,  # noqa: ANN401
        status_code: int,
        ctx: ResponseContext,
        failures: Sequence[ValidationFailure],
        cancellation: CancellationToken,
    ) -> None:
        self.calls.append((response, status_code, failures, cancellation))
        if self.respond:
            await ctx.send_response(
                MessagePackResponse({"data": response}, status_code=status_code),
                cancellation,
            )


@pytest.mark.unit
class TestSendIntercepted:
    """Test suite for the response interceptor gate."""

    async def test_missing_interceptor_raises_and_writes_nothing(
        self,
        ctx: ResponseContext,
        serializer: RecordingSerializer,
        transport: RecordingTransport,
    ) -> None:
        """Test no interceptor is a configuration error."""
        with pytest.raises(ConfigurationError, match="Response interceptor"):
            await send_intercepted(
                ResponseDispatcher(serializer), ctx, {"id": 1}, interceptor=None
            )

        assert serializer.calls == []
        assert transport.messages == []
        assert ctx.has_started is False

    async def test_interceptor_that_responds_skips_dispatch(
        self,
        ctx: ResponseContext,
        serializer: RecordingSerializer,
        transport: RecordingTransport,
    ) -> None:
        """Test the serializer is skipped once the interceptor started the response."""
        interceptor = RecordingInterceptor(respond=True)

        await send_intercepted(
            ResponseDispatcher(serializer), ctx, {"id": 1}, interceptor=interceptor
        )

        assert serializer.calls == []
        assert msgpack.unpackb(transport.body) == {"data": {"id": 1}}

    async def test_passive_interceptor_falls_through_to_dispatch(
        self,
        ctx: ResponseContext,
        serializer: RecordingSerializer,
    ) -> None:
        """Test the dispatcher runs exactly once when the interceptor only observes."""
        interceptor = RecordingInterceptor(respond=False)

        await send_intercepted(
            ResponseDispatcher(serializer),
            ctx,
            {"id": 1},
            interceptor=interceptor,
            status_code=202,
        )

        assert len(interceptor.calls) == 1
        assert len(serializer.calls) == 1
        assert serializer.calls[0].status_code == 202
        assert serializer.calls[0].payload == {"id": 1}

    async def test_interceptor_receives_failures_and_default_token(
        self,
        ctx: ResponseContext,
        serializer: RecordingSerializer,
    ) -> None:
        """Test the interceptor sees the failures and the request's abort token."""
        interceptor = RecordingInterceptor(respond=False)
        failures = (ValidationFailure(error_message="name is required", property_name="name"),)

        await send_intercepted(
            ResponseDispatcher(serializer),
            ctx,
            None,
            interceptor=interceptor,
            status_code=400,
            validation_failures=failures,
        )

        response, status_code, seen_failures, token = interceptor.calls[0]
        assert response is None
        assert status_code == 400
        assert list(seen_failures) == list(failures)
        assert token is ctx.request_aborted
        assert serializer.calls[0].cancellation is ctx.request_aborted

    async def test_explicit_token_is_shared(
        self,
        ctx: ResponseContext,
        serializer: RecordingSerializer,
    ) -> None:
        """Test the same token reaches the interceptor and the serializer."""
        interceptor = RecordingInterceptor(respond=False)
        token = CancellationToken("explicit")

        await send_intercepted(
            ResponseDispatcher(serializer),
            ctx,
            "payload",
            interceptor=interceptor,
            cancellation=token,
        )

        assert interceptor.calls[0][3] is token
        assert serializer.calls[0].cancellation is token
