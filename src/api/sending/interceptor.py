"""The response interceptor gate.

An interceptor sees the response DTO before it is serialized. It may write a
response of its own (for example wrap the DTO in an envelope); if it does,
the dispatcher is skipped so nothing is written twice.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from loguru import logger

from src.api.constants import BINARY_CONTENT_TYPE, HTTP_200_OK
from src.api.schemas.validation import ValidationFailure
from src.api.sending.context import ResponseContext
from src.api.sending.dispatcher import ResponseDispatcher
from src.core.cancellation import CancellationToken
from src.core.exceptions import ConfigurationError

type ResponseInterceptor = Callable[
    [Any, int, ResponseContext, Sequence[ValidationFailure], CancellationToken],
    Awaitable[None],
]


async def send_intercepted(
    dispatcher: ResponseDispatcher,
    ctx: ResponseContext,
    response: Any,  # noqa: ANN401 - any serializable payload
    *,
    interceptor: ResponseInterceptor | None,
    status_code: int = HTTP_200_OK,
    validation_failures: Sequence[ValidationFailure] = (),
    cancellation: CancellationToken | None = None,
) -> None:
    """Run the interceptor, then dispatch unless it already started the response.

    Args:
        dispatcher: Dispatcher used when the interceptor leaves the response
            unstarted.
        ctx: The response context.
        response: The response DTO.
        interceptor: The interceptor to run.
        status_code: HTTP status code.
        validation_failures: Failures collected by the endpoint so far.
        cancellation: Token for the write; the request's abort token when None.

    Raises:
        ConfigurationError: If no interceptor is configured.
    """
    if interceptor is None:
        raise ConfigurationError("Response interceptor has not been configured!")

    token = ctx.resolve_cancellation(cancellation)
    await interceptor(response, status_code, ctx, validation_failures, token)

    if ctx.has_started:
        logger.debug("Response interceptor started the response, skipping dispatch")
        return

    await dispatcher.send(ctx, response, status_code, BINARY_CONTENT_TYPE, token)
