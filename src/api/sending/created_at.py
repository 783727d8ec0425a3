"""``201 Created`` responses with a generated ``Location`` header.

The resolver takes a route name (or an endpoint class resolved to one through
the route registry) plus route values, asks the context's link generator for
the URI and writes it to ``Location`` before any body byte goes out. Without a
body the response is started empty; with one it goes through the dispatcher.
"""

from typing import Any, Protocol

from loguru import logger

from src.api.constants import BINARY_CONTENT_TYPE, HTTP_201_CREATED, LOCATION_HEADER
from src.api.routing.registry import HttpVerb
from src.api.sending.context import ResponseContext
from src.api.sending.dispatcher import ResponseDispatcher
from src.api.sending.links import route_values_to_dict
from src.core.cancellation import CancellationToken
from src.core.error_context import sanitize_dict
from src.core.exceptions import ConfigurationError

MISSING_LINK_GENERATOR_MESSAGE = (
    "Link generator is not available on the current response context! "
    "Set ResponseContext.link_generator yourself for unit tests."
)


class RouteNameResolver(Protocol):
    """Maps an endpoint class, verb and route number to a route name."""

    def resolve_route_name(
        self,
        endpoint: type,
        verb: HttpVerb | str | None = None,
        route_number: int | None = None,
    ) -> str:
        """Return the route name for the descriptor."""
        ...


class CreatedAtResolver:
    """Builds ``201 Created`` responses.

    Args:
        dispatcher: Dispatcher used when a body is supplied.
        route_names: Resolver for the endpoint-type form.
    """

    def __init__(
        self, dispatcher: ResponseDispatcher, route_names: RouteNameResolver
    ) -> None:
        self.dispatcher = dispatcher
        self.route_names = route_names

    async def send_created_at(
        self,
        ctx: ResponseContext,
        route_name: str,
        route_values: object | None = None,
        body: Any = None,  # noqa: ANN401 - any serializable payload
        *,
        absolute: bool = False,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``201 Created`` pointing at the named route.

        Args:
            ctx: The response context.
            route_name: Name of the route the new resource lives at.
            route_values: Route parameters; extra values become query params.
            body: Optional body; None starts an empty response.
            absolute: Generate an absolute URI instead of a path.
            cancellation: Token for the write; the request's abort token
                when None.

        Raises:
            ConfigurationError: If the context has no link generator.
        """
        link_generator = ctx.link_generator
        if link_generator is None:
            raise ConfigurationError(
                MISSING_LINK_GENERATOR_MESSAGE, context={"route_name": route_name}
            )

        token = ctx.resolve_cancellation(cancellation)
        ctx.mark_started()
        ctx.status_code = HTTP_201_CREATED

        if absolute:
            location = link_generator.uri_by_name(ctx, route_name, route_values)
        else:
            location = link_generator.path_by_name(route_name, route_values)
        ctx.headers[LOCATION_HEADER] = location if location is not None else ""

        logger.debug(
            "Sending 201 Created for route {}",
            route_name,
            route_name=route_name,
            location=location,
            has_body=body is not None,
        )

        if body is None:
            await ctx.start(token)
            return

        await self.dispatcher.send(
            ctx, body, HTTP_201_CREATED, BINARY_CONTENT_TYPE, token
        )

    async def send_created_at_endpoint(
        self,
        ctx: ResponseContext,
        endpoint: type,
        route_values: object | None = None,
        body: Any = None,  # noqa: ANN401 - any serializable payload
        *,
        verb: HttpVerb | str | None = None,
        route_number: int | None = None,
        absolute: bool = False,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Send ``201 Created`` pointing at an endpoint's route.

        The endpoint, verb and route number are resolved to a route name by
        the route registry, then handled like ``send_created_at``.
        """
        route_name = self.route_names.resolve_route_name(endpoint, verb, route_number)
        logger.debug(
            "Resolved {} to route {}",
            endpoint.__qualname__,
            route_name,
            route_name=route_name,
            route_values=sanitize_dict(route_values_to_dict(route_values)),
        )
        await self.send_created_at(
            ctx,
            route_name,
            route_values,
            body,
            absolute=absolute,
            cancellation=cancellation,
        )

