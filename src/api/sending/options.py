"""Application-wide endpoint options.

``EndpointOptions`` is configured once per application and shared read-only
by every request. It carries the serializer binding, the optional global
response interceptor, an optional link generator replacing the one derived
from the router, and the route registry.
"""

from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Any

from loguru import logger
from starlette.applications import Starlette

from src.api.routing.registry import RouteRegistry
from src.api.sending.interceptor import ResponseInterceptor
from src.api.sending.links import LinkGenerator
from src.api.sending.serializer import ResponseSerializer, create_msgpack_serializer
from src.core.config import Settings
from src.core.exceptions import ConfigurationError
from src.core.types import AsgiScope


@dataclass(frozen=True)
class EndpointOptions:
    """Immutable dispatch configuration shared by all endpoints."""

    serializer: ResponseSerializer = field(default_factory=create_msgpack_serializer)
    global_response_interceptor: ResponseInterceptor | None = None
    link_generator: LinkGenerator | None = None
    route_registry: RouteRegistry = field(default_factory=RouteRegistry)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "EndpointOptions":  # noqa: ANN401
        """Build options whose serializer follows ``settings.serialization_config``."""
        options = cls(serializer=create_msgpack_serializer(settings.serialization_config))
        return replace(options, **overrides) if overrides else options


def configure_endpoints(app: Starlette, options: EndpointOptions) -> None:
    """Attach endpoint options to an application.

    Raises:
        ConfigurationError: If the application was already configured.
    """
    if getattr(app.state, "endpoint_options", None) is not None:
        raise ConfigurationError("Endpoint options are already configured for this application")
    app.state.endpoint_options = options
    logger.debug(
        "Endpoint options configured",
        global_interceptor=options.global_response_interceptor is not None,
        custom_link_generator=options.link_generator is not None,
    )


@lru_cache
def default_endpoint_options() -> EndpointOptions:
    """Options used by endpoints mounted on an unconfigured application."""
    return EndpointOptions()


def get_endpoint_options(scope: AsgiScope) -> EndpointOptions:
    """Return the options of the application serving ``scope``."""
    app = scope.get("app")
    state = getattr(app, "state", None)
    options = getattr(state, "endpoint_options", None)
    return options if options is not None else default_endpoint_options()
