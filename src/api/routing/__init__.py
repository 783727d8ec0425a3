"""Named routes for endpoint classes.

- **HttpVerb**: The HTTP verbs an endpoint can answer
- **RouteRegistry**: Turns endpoint classes into named Starlette routes and
  resolves ``(endpoint, verb, route number)`` back to the route name
"""

from src.api.routing.registry import HttpVerb, RouteRegistry, endpoint_name, normalize_verb

__all__ = ["HttpVerb", "RouteRegistry", "endpoint_name", "normalize_verb"]
