"""Endpoint base class with binary response helpers.

Subclass ``Endpoint``, declare the paths and verbs, and implement one handler
per verb (``get``, ``post``, ...). Handlers write their response through the
``send_*_msgpack`` methods; a handler that returns without starting the
response gets a default one.

Example:
    class CreateUser(Endpoint):
        routes = ("/users",)
        verbs = (HttpVerb.POST,)

        async def post(self, request: Request) -> None:
            user = await create_user(await request.json())
            await self.send_created_at_endpoint_msgpack(
                GetUser, {"user_id": user.id}, user
            )
"""

import inspect
from collections.abc import Sequence
from typing import Any, ClassVar, NoReturn

from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.endpoints import HTTPEndpoint
from starlette.requests import ClientDisconnect
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from src.api.constants import (
    BINARY_CONTENT_TYPE,
    GENERAL_ERRORS_PROPERTY,
    HTTP_200_OK,
    HTTP_204_NO_CONTENT,
)
from src.api.routing.registry import HttpVerb
from src.api.schemas.validation import ValidationFailure
from src.api.sending.context import ResponseContext
from src.api.sending.created_at import CreatedAtResolver
from src.api.sending.dispatcher import ResponseDispatcher
from src.api.sending.interceptor import ResponseInterceptor, send_intercepted
from src.api.sending.options import get_endpoint_options
from src.core.cancellation import CancellationToken
from src.core.constants import REASON_CLIENT_DISCONNECTED
from src.core.context import RequestContext
from src.core.exceptions import ResponseCancelledError, ValidationFailureError


class Endpoint(HTTPEndpoint):
    """Base class for endpoints that answer with MessagePack bodies.

    Class attributes:
        routes: Paths the endpoint is mounted at.
        verbs: Verbs it answers.
        name: Custom route name replacing the generated one.
        response_interceptor: Interceptor used by ``send_intercepted_msgpack``
            ahead of the global one.
    """

    routes: ClassVar[Sequence[str]] = ()
    verbs: ClassVar[Sequence[HttpVerb | str]] = (HttpVerb.GET,)
    name: ClassVar[str | None] = None
    response_interceptor: ClassVar[ResponseInterceptor | None] = None

    def __init__(self, scope: Scope, receive: Receive, send: Send) -> None:
        super().__init__(scope, receive, send)
        self.endpoint_options = get_endpoint_options(scope)
        self.ctx = ResponseContext.from_scope(
            scope, receive, send, link_generator=self.endpoint_options.link_generator
        )
        self.dispatcher = ResponseDispatcher(self.endpoint_options.serializer)
        self.created_at = CreatedAtResolver(
            self.dispatcher, self.endpoint_options.route_registry
        )
        self.response: Any = None
        self.validation_failures: list[ValidationFailure] = []

    async def dispatch(self) -> None:
        """Run the handler for the request method and finalize the response."""
        request = self.ctx.request
        handler_name = (
            "get"
            if request.method == "HEAD" and not hasattr(self, "head")
            else request.method.lower()
        )
        handler = getattr(self, handler_name, self.method_not_allowed)
        endpoint = type(self).__qualname__
        RequestContext.set_endpoint_name(endpoint)

        with logger.contextualize(endpoint=endpoint):
            try:
                if inspect.iscoroutinefunction(handler):
                    result = await handler(request)
                else:
                    result = await run_in_threadpool(handler, request)

                if not self.ctx.has_started:
                    await self._send_default(result)
            except ClientDisconnect:
                self.ctx.abort(REASON_CLIENT_DISCONNECTED)
                logger.info("Client disconnected before the request was handled")
            except ResponseCancelledError as e:
                # Before the start message an error document can still go out
                if not self.ctx.transport_started:
                    raise
                logger.info(
                    "Response cancelled after it started: {}",
                    e.reason,
                    status_code=self.ctx.status_code,
                )

    async def _send_default(self, result: Any) -> None:  # noqa: ANN401
        if isinstance(result, Response):
            await self.ctx.send_response(result)
        elif result is not None:
            await self.send_ok_msgpack(result)
        elif self.response is not None:
            await self.send_ok_msgpack(self.response)
        else:
            self.ctx.status_code = HTTP_204_NO_CONTENT
            await self.ctx.start()

    async def send_msgpack(
        self,
        response: Any,  # noqa: ANN401 - any serializable payload
        status_code: int = HTTP_200_OK,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``response`` as MessagePack with ``status_code``."""
        self.response = response
        await self.dispatcher.send(
            self.ctx, response, status_code, BINARY_CONTENT_TYPE, cancellation
        )

    async def send_ok_msgpack(
        self,
        response: Any,  # noqa: ANN401 - any serializable payload
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``response`` as MessagePack with ``200 OK``."""
        self.response = response
        await self.dispatcher.send_ok(self.ctx, response, cancellation)

    async def send_intercepted_msgpack(
        self,
        response: Any,  # noqa: ANN401 - any serializable payload
        status_code: int = HTTP_200_OK,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``response`` through the response interceptor.

        The endpoint's own interceptor wins over the global one.

        Raises:
            ConfigurationError: If neither interceptor is configured.
        """
        self.response = response
        interceptor = (
            type(self).response_interceptor
            or self.endpoint_options.global_response_interceptor
        )
        await send_intercepted(
            self.dispatcher,
            self.ctx,
            response,
            interceptor=interceptor,
            status_code=status_code,
            validation_failures=tuple(self.validation_failures),
            cancellation=cancellation,
        )

    async def send_created_at_msgpack(
        self,
        endpoint_name: str,
        route_values: object | None,
        response_body: Any = None,  # noqa: ANN401 - any serializable payload
        *,
        generate_absolute_url: bool = False,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``201 Created`` with a ``Location`` pointing at a named route."""
        self.response = response_body
        await self.created_at.send_created_at(
            self.ctx,
            endpoint_name,
            route_values,
            response_body,
            absolute=generate_absolute_url,
            cancellation=cancellation,
        )

    async def send_created_at_endpoint_msgpack(
        self,
        endpoint: type,
        route_values: object | None,
        response_body: Any = None,  # noqa: ANN401 - any serializable payload
        *,
        verb: HttpVerb | str | None = None,
        route_number: int | None = None,
        generate_absolute_url: bool = False,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``201 Created`` with a ``Location`` pointing at another endpoint.

        Args:
            endpoint: The endpoint class the new resource is served by.
            route_values: Route parameters for the endpoint's path.
            response_body: Optional body; None sends an empty 201.
            verb: The endpoint's verb, when it answers more than one.
            route_number: Zero-based path index, when it has more than one.
            generate_absolute_url: Generate an absolute URI instead of a path.
            cancellation: Token for the write; the request's abort token
                when None.
        """
        self.response = response_body
        await self.created_at.send_created_at_endpoint(
            self.ctx,
            endpoint,
            route_values,
            response_body,
            verb=verb,
            route_number=route_number,
            absolute=generate_absolute_url,
            cancellation=cancellation,
        )

    def add_error(
        self,
        message: str,
        property_name: str = GENERAL_ERRORS_PROPERTY,
        error_code: str | None = None,
    ) -> None:
        """Record a validation failure."""
        self.validation_failures.append(
            ValidationFailure(
                property_name=property_name,
                error_message=message,
                error_code=error_code,
            )
        )

    @property
    def validation_failed(self) -> bool:
        """True when at least one validation failure was recorded."""
        return bool(self.validation_failures)

    def throw_if_any_errors(self) -> None:
        """Raise if validation failures were recorded.

        Raises:
            ValidationFailureError: If ``validation_failures`` is not empty.
        """
        if self.validation_failures:
            raise ValidationFailureError(self.validation_failures)

    def throw_error(
        self,
        message: str,
        property_name: str = GENERAL_ERRORS_PROPERTY,
        error_code: str | None = None,
    ) -> NoReturn:
        """Record a validation failure and raise immediately.

        Raises:
            ValidationFailureError: Always.
        """
        self.add_error(message, property_name, error_code)
        raise ValidationFailureError(self.validation_failures)
