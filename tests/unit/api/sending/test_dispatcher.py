"""Unit tests for src/api/sending/dispatcher.py."""

import pytest

from src.api.constants import BINARY_CONTENT_TYPE
from src.api.sending.context import ResponseContext
from src.api.sending.dispatcher import ResponseDispatcher
from src.core.cancellation import CancellationToken
from src.core.types import SerializerOptions

from tests.unit.api.doubles import RecordingSerializer


@pytest.mark.unit
class TestResponseDispatcher:
    """Test suite for ResponseDispatcher."""

    async def test_send_sets_status_and_marks_started(
        self, ctx: ResponseContext, serializer: RecordingSerializer
    ) -> None:
        """Test status and started flag are set before the serializer runs."""
        # Arrange
        dispatcher = ResponseDispatcher(serializer)

        # Act
        await dispatcher.send(ctx, {"id": 1}, 202)

        # Assert
        assert ctx.status_code == 202
        assert ctx.has_started is True
        call = serializer.calls[0]
        assert call.status_code == 202
        assert call.started is True

    async def test_send_passes_payload_and_content_type(
        self, ctx: ResponseContext, serializer: RecordingSerializer
    ) -> None:
        """Test the serializer receives the payload, binary tag and no options."""
        dispatcher = ResponseDispatcher(serializer)

        await dispatcher.send(ctx, {"id": 1})

        assert len(serializer.calls) == 1
        call = serializer.calls[0]
        assert call.payload == {"id": 1}
        assert call.content_type == BINARY_CONTENT_TYPE
        assert call.options is None

    async def test_send_without_token_uses_request_aborted(
        self, ctx: ResponseContext, serializer: RecordingSerializer
    ) -> None:
        """Test the request's abort token is forwarded when none is given."""
        dispatcher = ResponseDispatcher(serializer)

        await dispatcher.send(ctx, "payload")

        assert serializer.calls[0].cancellation is ctx.request_aborted

    async def test_send_forwards_explicit_token(
        self, ctx: ResponseContext, serializer: RecordingSerializer
    ) -> None:
        """Test an explicit token reaches the serializer unchanged."""
        dispatcher = ResponseDispatcher(serializer)
        token = CancellationToken("explicit")

        await dispatcher.send(ctx, "payload", cancellation=token)

        assert serializer.calls[0].cancellation is token

    async def test_send_on_started_context_is_not_an_error(
        self, ctx: ResponseContext, serializer: RecordingSerializer
    ) -> None:
        """Test dispatching on an already-marked context still serializes."""
        dispatcher = ResponseDispatcher(serializer)
        ctx.mark_started()

        await dispatcher.send(ctx, "payload", 200)

        assert len(serializer.calls) == 1

    async def test_send_ok_uses_200(
        self, ctx: ResponseContext, serializer: RecordingSerializer
    ) -> None:
        """Test send_ok dispatches with 200 OK."""
        dispatcher = ResponseDispatcher(serializer)
        ctx.status_code = 418

        await dispatcher.send_ok(ctx, [1, 2, 3])

        assert ctx.status_code == 200
        assert serializer.calls[0].payload == [1, 2, 3]

    async def test_serializer_errors_propagate(self, ctx: ResponseContext) -> None:
        """Test failures raised by the serializer are not swallowed."""

        async def broken(
            ctx: ResponseContext,
            payload: object,
            content_type: str,
            options: SerializerOptions | None,
            cancellation: CancellationToken,
        ) -> None:
            raise TypeError("cannot encode")

        dispatcher = ResponseDispatcher(broken)

        with pytest.raises(TypeError, match="cannot encode"):
            await dispatcher.send(ctx, object())

        assert ctx.has_started is True
