"""Reverse URL generation for ``Location`` headers.

``LinkGenerator`` is the contract the created-at resolver needs: turn a route
name plus route values into a path or an absolute URI, or ``None`` when the
name cannot be resolved. ``StarletteLinkGenerator`` implements it on top of
``Router.url_path_for``.

Route values that are not parameters of the named route are appended as a
query string, so ``{"id": 7, "expand": "owner"}`` against ``/users/{id}``
yields ``/users/7?expand=owner``. Path values are percent-encoded, so the
generated link is always a valid ASCII URI reference.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote, urlencode

from loguru import logger
from pydantic import BaseModel
from starlette.convertors import Convertor, PathConvertor, StringConvertor
from starlette.datastructures import URLPath
from starlette.routing import BaseRoute, Mount, NoMatchFound

from src.core.error_context import sanitize_dict
from src.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from src.api.sending.context import ResponseContext


class LinkGenerator(Protocol):
    """Turns a route name and route values into a URI."""

    def path_by_name(self, route_name: str, route_values: object | None) -> str | None:
        """Return the path for the named route, or None if it cannot be built."""
        ...

    def uri_by_name(
        self, ctx: ResponseContext, route_name: str, route_values: object | None
    ) -> str | None:
        """Return the absolute URI for the named route, or None if it cannot be built."""
        ...


class UrlPathProvider(Protocol):
    """Anything exposing Starlette's reverse routing (Router, Starlette, FastAPI)."""

    @property
    def routes(self) -> list[BaseRoute]: ...

    def url_path_for(self, name: str, /, **path_params: Any) -> URLPath: ...  # noqa: ANN401


def _declared_slots(cls: type) -> tuple[str, ...]:
    slots = getattr(cls, "__slots__", ())
    return (slots,) if isinstance(slots, str) else tuple(slots)


def route_values_to_dict(route_values: object | None) -> dict[str, Any]:
    """Flatten a route-values object into a mapping.

    Accepts mappings, pydantic models, dataclass instances, named tuples and
    plain objects (``__dict__`` or ``__slots__``). ``None`` is an empty bag.

    Raises:
        ConfigurationError: If the value has no named fields to read.
    """
    if route_values is None:
        return {}
    if isinstance(route_values, Mapping):
        return dict(route_values)
    if isinstance(route_values, BaseModel):
        return route_values.model_dump()
    if dataclasses.is_dataclass(route_values) and not isinstance(route_values, type):
        return dataclasses.asdict(route_values)
    if isinstance(route_values, tuple) and hasattr(route_values, "_asdict"):
        return dict(route_values._asdict())
    if hasattr(route_values, "__dict__"):
        return {k: v for k, v in vars(route_values).items() if not k.startswith("_")}

    slots = [
        slot
        for cls in type(route_values).__mro__
        for slot in _declared_slots(cls)
        if not slot.startswith("_")
    ]
    if not slots:
        raise ConfigurationError(
            f"Route values must be a mapping or an object with named fields, "
            f"got {type(route_values).__name__}",
            context={"route_values_type": type(route_values).__name__},
        )
    return {slot: getattr(route_values, slot) for slot in slots if hasattr(route_values, slot)}


def find_route_params(
    routes: Iterable[BaseRoute], name: str
) -> dict[str, Convertor[Any]] | None:
    """Find the path parameters of the route registered under ``name``.

    Mounted routes are searched with Starlette's ``mount:child`` naming.

    Returns:
        dict[str, Convertor] | None: Parameter convertors keyed by name, or
            None when no route has that name.
    """
    for route in routes:
        if isinstance(route, Mount):
            if route.name is None:
                remaining = name
            elif name.startswith(f"{route.name}:"):
                remaining = name[len(route.name) + 1 :]
            else:
                continue
            child = find_route_params(route.routes, remaining)
            if child is not None:
                mount_params = {
                    k: v for k, v in route.param_convertors.items() if k != "path"
                }
                return mount_params | child
        elif getattr(route, "name", None) == name:
            return dict(getattr(route, "param_convertors", {}))
    return None


def encode_path_value(value: Any, convertor: Convertor[Any]) -> Any:  # noqa: ANN401
    """Percent-encode a path value for a string or path parameter.

    ``{name:path}`` parameters keep their ``/`` separators. Typed parameters
    (int, float, uuid) are left for their convertor to format.
    """
    if isinstance(convertor, PathConvertor):
        return quote(str(value), safe="/")
    if isinstance(convertor, StringConvertor):
        return quote(str(value), safe="")
    return value


def _with_query(url: str, query: Mapping[str, Any]) -> str:
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(query, doseq=True)}"


class StarletteLinkGenerator:
    """Link generator backed by a Starlette router.

    Args:
        router: The router (or application) whose named routes are used.
    """

    def __init__(self, router: UrlPathProvider) -> None:
        self.router = router

    def path_by_name(self, route_name: str, route_values: object | None) -> str | None:
        """Return the path for the named route, or None if it cannot be built."""
        resolved = self._resolve(route_name, route_values)
        if resolved is None:
            return None
        url_path, query = resolved
        return _with_query(str(url_path), query)

    def uri_by_name(
        self, ctx: ResponseContext, route_name: str, route_values: object | None
    ) -> str | None:
        """Return the absolute URI for the named route, or None if it cannot be built."""
        resolved = self._resolve(route_name, route_values)
        if resolved is None:
            return None
        url_path, query = resolved
        absolute = url_path.make_absolute_url(base_url=ctx.request.base_url)
        return _with_query(str(absolute), query)

    def _resolve(
        self, route_name: str, route_values: object | None
    ) -> tuple[URLPath, dict[str, Any]] | None:
        values = route_values_to_dict(route_values)
        params = find_route_params(self.router.routes, route_name)
        if params is None:
            logger.warning(
                "No route named {} is registered",
                route_name,
                route_name=route_name,
            )
            return None

        path_params = {
            k: encode_path_value(v, params[k]) for k, v in values.items() if k in params
        }
        query = {k: v for k, v in values.items() if k not in params}
        try:
            url_path = self.router.url_path_for(route_name, **path_params)
        # Convertors reject values with ValueError (int("abc")) or
        # AssertionError (negative int, empty string)
        except (NoMatchFound, ValueError, AssertionError) as e:
            logger.warning(
                "Route values do not match the parameters of route {}: {}",
                route_name,
                type(e).__name__,
                route_name=route_name,
                route_values=sanitize_dict(values),
            )
            return None
        return url_path, query
