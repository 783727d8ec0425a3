"""Route naming and registration for endpoint classes.

Every route an endpoint class answers gets a name built from the class's
dotted import path. The name is qualified with the lower-cased verb when the
class answers more than one verb, and with the zero-based route number when
it is mounted at more than one path:

    get-app.endpoints.GetUser-1

A class-level ``name`` replaces the generated name. Such endpoints can still
be linked to by name, but not by endpoint type.
"""

from collections.abc import Iterable
from enum import Enum

from loguru import logger
from starlette.routing import Route

from src.core.exceptions import ConfigurationError


class HttpVerb(Enum):
    """HTTP verbs an endpoint can be registered for."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


def normalize_verb(verb: HttpVerb | str) -> HttpVerb:
    """Coerce a verb string (any case) to ``HttpVerb``.

    Raises:
        ConfigurationError: If the string is not a known verb.
    """
    if isinstance(verb, HttpVerb):
        return verb
    try:
        return HttpVerb(verb.upper())
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown HTTP verb: {verb}", context={"verb": verb}, cause=e
        ) from e


def endpoint_name(
    endpoint: type,
    verb: HttpVerb | str | None = None,
    route_number: int | None = None,
) -> str:
    """Apply the naming rule to an endpoint class.

    Args:
        endpoint: The endpoint class.
        verb: Verb to prefix, lower-cased.
        route_number: Zero-based route number to suffix.

    Returns:
        str: The route name.
    """
    parts = []
    if verb is not None:
        parts.append(normalize_verb(verb).value.lower())
    parts.append(f"{endpoint.__module__}.{endpoint.__qualname__}")
    if route_number is not None:
        parts.append(str(route_number))
    return "-".join(parts)


class RouteRegistry:
    """Registry of endpoint classes and the route names they were given."""

    def __init__(self) -> None:
        self._names: set[str] = set()

    @property
    def registered_names(self) -> frozenset[str]:
        """Names of every route registered so far."""
        return frozenset(self._names)

    def register(self, endpoint: type) -> list[Route]:
        """Create one named ``Route`` per (path, verb) of an endpoint class.

        Args:
            endpoint: An endpoint class declaring ``routes`` and ``verbs``.

        Returns:
            list[Route]: The routes, ready to be added to a router.

        Raises:
            ConfigurationError: If the endpoint declares no paths or no verbs.
        """
        paths: tuple[str, ...] = tuple(getattr(endpoint, "routes", ()))
        verbs = [normalize_verb(v) for v in getattr(endpoint, "verbs", ())]
        if not paths or not verbs:
            raise ConfigurationError(
                f"Endpoint {endpoint.__qualname__} must declare at least one route and verb",
                context={"endpoint": endpoint.__qualname__},
            )

        custom_name: str | None = getattr(endpoint, "name", None)
        multi_verb = len(verbs) > 1
        multi_route = len(paths) > 1

        created = []
        for route_number, path in enumerate(paths):
            for verb in verbs:
                if custom_name:
                    name = custom_name
                    if multi_verb:
                        name = f"{verb.value.lower()}-{name}"
                    if multi_route:
                        name = f"{name}-{route_number}"
                else:
                    name = endpoint_name(
                        endpoint,
                        verb if multi_verb else None,
                        route_number if multi_route else None,
                    )
                created.append(Route(path, endpoint=endpoint, methods=[verb.value], name=name))
                self._names.add(name)

        logger.debug(
            "Registered endpoint {} with {} route(s)",
            endpoint.__qualname__,
            len(created),
            route_names=sorted(route.name for route in created),
        )
        return created

    def register_all(self, endpoints: Iterable[type]) -> list[Route]:
        """Register several endpoint classes, keeping their order."""
        routes: list[Route] = []
        for endpoint in endpoints:
            routes.extend(self.register(endpoint))
        return routes

    def resolve_route_name(
        self,
        endpoint: type,
        verb: HttpVerb | str | None = None,
        route_number: int | None = None,
    ) -> str:
        """Resolve an endpoint descriptor to its route name.

        The naming rule is applied as given; an unregistered result is
        returned anyway, and the link generator will not find it.

        Args:
            endpoint: The endpoint class.
            verb: The verb, required when the endpoint answers several.
            route_number: The route number, required when the endpoint has
                several paths.

        Returns:
            str: The route name.
        """
        name = endpoint_name(endpoint, verb, route_number)
        if self._names and name not in self._names:
            logger.warning(
                "Route name {} was never registered",
                name,
                route_name=name,
            )
        return name
