"""The response serializer binding.

A serializer receives the response context, the payload, the content-type tag,
optional serializer options and the resolved cancellation token, and writes
the encoded body through the context. The application picks one at startup
(``EndpointOptions.serializer``) and hands it to every dispatcher; it is
never swapped while requests are being served.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from src.api.sending.context import ResponseContext
from src.api.utils.responses import MessagePackResponse
from src.core.cancellation import CancellationToken
from src.core.config import SerializationConfig
from src.core.types import SerializerOptions

type ResponseSerializer = Callable[
    [ResponseContext, Any, str, SerializerOptions | None, CancellationToken],
    Awaitable[None],
]


def create_msgpack_serializer(
    config: SerializationConfig | None = None,
) -> ResponseSerializer:
    """Build the default MessagePack serializer.

    Per-call ``options`` override the configured ``use_bin_type`` and
    ``use_single_float`` values.

    Args:
        config: Encoder settings; defaults to ``SerializationConfig()``.

    Returns:
        ResponseSerializer: The serializer function.
    """
    defaults = (config or SerializationConfig()).model_dump()

    async def msgpack_serializer(
        ctx: ResponseContext,
        payload: Any,  # noqa: ANN401 - any msgpack-encodable payload
        content_type: str,
        options: SerializerOptions | None,
        cancellation: CancellationToken,
    ) -> None:
        cancellation.raise_if_cancelled()
        encoder_options = {**defaults, **(options or {})}
        response = MessagePackResponse(
            payload,
            status_code=ctx.status_code,
            media_type=content_type,
            use_bin_type=encoder_options["use_bin_type"],
            use_single_float=encoder_options["use_single_float"],
        )
        await ctx.send_response(response, cancellation)

    return msgpack_serializer
