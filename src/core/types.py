"""Type aliases for dynamic data structures throughout the application.

This module centralizes type definitions for data that cannot be statically
typed, providing clear semantic meaning and documentation for these types.
"""

from collections.abc import Mapping
from typing import Any

# ASGI scope type for endpoint and middleware implementations
# Following ASGI spec: https://asgi.readthedocs.io/en/latest/specs/www.html
type AsgiScope = dict[str, Any]

# ASGI event message exchanged through receive/send callables
type AsgiMessage = dict[str, Any]

# Extra options handed to the response serializer (JSON encoder options on
# the JSON path, always None for binary sends)
type SerializerOptions = Mapping[str, Any]
