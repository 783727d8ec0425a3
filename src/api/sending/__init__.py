"""Binary response dispatch.

- **ResponseContext**: Per-request status, headers, started flag and abort token
- **ResponseDispatcher**: Marks the response started and hands the payload to
  the serializer
- **CreatedAtResolver**: ``201 Created`` with a generated ``Location`` header
- **send_intercepted**: Runs a response interceptor before dispatching
- **StarletteLinkGenerator**: Reverse routing through the Starlette router
- **EndpointOptions**: Application-wide serializer, interceptor and registry
"""

from src.api.sending.context import ResponseContext
from src.api.sending.created_at import CreatedAtResolver, RouteNameResolver
from src.api.sending.dispatcher import ResponseDispatcher
from src.api.sending.interceptor import ResponseInterceptor, send_intercepted
from src.api.sending.links import LinkGenerator, StarletteLinkGenerator
from src.api.sending.options import (
    EndpointOptions,
    configure_endpoints,
    get_endpoint_options,
)
from src.api.sending.serializer import ResponseSerializer, create_msgpack_serializer

__all__ = [
    "CreatedAtResolver",
    "EndpointOptions",
    "LinkGenerator",
    "ResponseContext",
    "ResponseDispatcher",
    "ResponseInterceptor",
    "ResponseSerializer",
    "RouteNameResolver",
    "StarletteLinkGenerator",
    "configure_endpoints",
    "create_msgpack_serializer",
    "get_endpoint_options",
    "send_intercepted",
]
