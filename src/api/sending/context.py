"""Per-request response state shared by the dispatcher and the created-at resolver.

A ``ResponseContext`` wraps one ASGI request/response exchange. It owns the
status code and headers that will go out, the monotonic "started" flag, and
the request's abort token. Bytes only reach the transport through
``send_response`` and ``start``, which check the cancellation token before
every ASGI message and refuse to start a second response.

The context is owned by a single request-handling flow; nothing here is
locked.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial

from loguru import logger
from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from src.api.constants import HTTP_200_OK
from src.api.sending.links import LinkGenerator, StarletteLinkGenerator
from src.core.cancellation import CancellationToken
from src.core.constants import REASON_TRANSPORT_FAILED
from src.core.exceptions import ResponseAlreadySentError, ResponseCancelledError
from src.core.types import AsgiMessage


class ResponseContext:
    """Mutable response state for one in-flight request.

    Args:
        scope: ASGI connection scope.
        receive: ASGI receive callable.
        send: ASGI send callable.
        link_generator: Link generator used for ``Location`` headers.
        request_aborted: Abort token for the request; a fresh one is created
            when not supplied.
    """

    def __init__(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
        *,
        link_generator: LinkGenerator | None = None,
        request_aborted: CancellationToken | None = None,
    ) -> None:
        self.scope = scope
        self.request = Request(scope, receive)
        self.status_code = HTTP_200_OK
        self.headers = MutableHeaders()
        self.request_aborted = request_aborted or CancellationToken("request_aborted")
        self.link_generator = link_generator
        self._receive = receive
        self._send = send
        self._marked_started = False
        self._transport_started = False
        self._started_hooks: list[Callable[[], None]] = []

    @classmethod
    def from_scope(
        cls,
        scope: Scope,
        receive: Receive,
        send: Send,
        *,
        link_generator: LinkGenerator | None = None,
    ) -> ResponseContext:
        """Create a context, deriving the link generator from the scope's router.

        Args:
            scope: ASGI connection scope.
            receive: ASGI receive callable.
            send: ASGI send callable.
            link_generator: Explicit link generator; wins over the router.

        Returns:
            ResponseContext: The new context.
        """
        if link_generator is None:
            # Same lookup order as Request.url_for
            provider = scope.get("router") or scope.get("app")
            if provider is not None and hasattr(provider, "url_path_for"):
                link_generator = StarletteLinkGenerator(provider)
        return cls(scope, receive, send, link_generator=link_generator)

    @property
    def has_started(self) -> bool:
        """True once the response was marked started or hit the transport."""
        return self._marked_started or self._transport_started

    @property
    def transport_started(self) -> bool:
        """True once ``http.response.start`` was handed to the transport.

        From then on no other response, error documents included, can be sent.
        """
        return self._transport_started

    def on_started(self, hook: Callable[[], None]) -> None:
        """Register a hook fired the first time the response is marked started.

        Hooks registered after that point run immediately.
        """
        if self._marked_started:
            hook()
            return
        self._started_hooks.append(hook)

    def mark_started(self) -> None:
        """Mark the response as started.

        Idempotent: hooks fire only on the first call and later calls are
        not errors.
        """
        if self._marked_started:
            return
        self._marked_started = True
        hooks, self._started_hooks = self._started_hooks, []
        for hook in hooks:
            hook()

    def resolve_cancellation(
        self, cancellation: CancellationToken | None
    ) -> CancellationToken:
        """Return the caller's token, or the request's abort token when unset."""
        return cancellation if cancellation is not None else self.request_aborted

    def abort(self, reason: str) -> None:
        """Fire the request's abort token."""
        self.request_aborted.cancel(reason)

    async def send_response(
        self, response: Response, cancellation: CancellationToken | None = None
    ) -> None:
        """Write a Starlette response to the transport.

        Context headers are merged into the response; headers the response
        already carries take precedence.

        Args:
            response: The response to write.
            cancellation: Token checked before every ASGI message.

        Raises:
            ResponseCancelledError: If the token fired or the transport failed.
            ResponseAlreadySentError: If a response was already written.
        """
        token = self.resolve_cancellation(cancellation)
        token.raise_if_cancelled()

        present = {key for key, _ in response.raw_headers}
        response.raw_headers.extend(
            (key, value) for key, value in self.headers.raw if key not in present
        )

        self.mark_started()
        self.status_code = response.status_code
        await response(self.scope, self._receive, partial(self._guarded_send, token))

    async def start(self, cancellation: CancellationToken | None = None) -> None:
        """Begin and immediately complete an empty response.

        The current status code and headers are sent with an empty body.
        """
        await self.send_response(Response(status_code=self.status_code), cancellation)

    async def _guarded_send(self, token: CancellationToken, message: AsgiMessage) -> None:
        token.raise_if_cancelled()

        if message["type"] == "http.response.start":
            if self._transport_started:
                raise ResponseAlreadySentError(
                    context={"path": self.request.url.path}
                )
            self._transport_started = True

        try:
            await self._send(message)
        except OSError as e:
            self.abort(REASON_TRANSPORT_FAILED)
            logger.info(
                "Transport failed while writing response: {}",
                e,
                status_code=self.status_code,
            )
            raise ResponseCancelledError(
                "Transport failed while writing the response",
                reason=REASON_TRANSPORT_FAILED,
                cause=e,
            ) from e
