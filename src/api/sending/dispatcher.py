"""Binary response dispatch."""

from typing import Any

from loguru import logger

from src.api.constants import BINARY_CONTENT_TYPE, HTTP_200_OK
from src.api.sending.context import ResponseContext
from src.api.sending.serializer import ResponseSerializer
from src.core.cancellation import CancellationToken


class ResponseDispatcher:
    """Finalizes a response through the configured serializer.

    Args:
        serializer: The serializer binding every body goes through.
    """

    def __init__(self, serializer: ResponseSerializer) -> None:
        self.serializer = serializer

    async def send(
        self,
        ctx: ResponseContext,
        payload: Any,  # noqa: ANN401 - any serializable payload
        status_code: int = HTTP_200_OK,
        content_type: str = BINARY_CONTENT_TYPE,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``payload`` with ``status_code``.

        The context is marked started and its status set before the
        serializer runs. A fired cancellation token surfaces from the
        serializer as ``ResponseCancelledError``.

        Args:
            ctx: The response context.
            payload: The body to serialize.
            status_code: HTTP status code.
            content_type: Content-type tag handed to the serializer.
            cancellation: Token for the write; the request's abort token
                when None.
        """
        token = ctx.resolve_cancellation(cancellation)
        ctx.mark_started()
        ctx.status_code = status_code

        logger.debug(
            "Dispatching {} response",
            content_type,
            status_code=status_code,
            content_type=content_type,
        )
        await self.serializer(ctx, payload, content_type, None, token)

    async def send_ok(
        self,
        ctx: ResponseContext,
        payload: Any,  # noqa: ANN401 - any serializable payload
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``payload`` with ``200 OK``."""
        await self.send(ctx, payload, HTTP_200_OK, cancellation=cancellation)
