"""Response classes for the JSON error path and the binary body path.

- **ORJSONResponse**: JSON rendering with orjson, used for error documents
  and as the FastAPI default response class
- **MessagePackResponse**: MessagePack rendering with msgpack, used by the
  default response serializer for every binary send

MessagePack has no native representation for datetimes, UUIDs, decimals,
enums or pydantic models; ``encode_default`` converts them the same way the
JSON path would (ISO-8601 strings, canonical strings, enum values, dumped
models).
"""

import dataclasses
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

import msgpack
import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.background import BackgroundTask
from starlette.responses import Response

from src.api.constants import BINARY_CONTENT_TYPE


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump()

        return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)


def encode_default(obj: Any) -> Any:  # noqa: ANN401 - msgpack default hook
    """Convert values msgpack cannot encode natively.

    Args:
        obj: The value msgpack failed to encode.

    Returns:
        Any: A msgpack-encodable replacement.

    Raises:
        TypeError: If the value has no known conversion.
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, (UUID, Decimal)):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not msgpack serializable")


class MessagePackResponse(Response):
    """Starlette Response rendering its content with msgpack.

    Args:
        content: The payload to encode.
        status_code: HTTP status code.
        headers: Extra response headers.
        media_type: Content type tag, defaults to ``application/x-msgpack``.
        background: Optional background task run after the body is sent.
        use_bin_type: Encode bytes with the msgpack bin type.
        use_single_float: Encode floats as 32-bit.
    """

    media_type = BINARY_CONTENT_TYPE

    def __init__(
        self,
        content: Any = None,  # noqa: ANN401 - any msgpack-encodable payload
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        media_type: str | None = None,
        background: BackgroundTask | None = None,
        *,
        use_bin_type: bool = True,
        use_single_float: bool = False,
    ) -> None:
        # render() runs inside Response.__init__, so options must be set first
        self.use_bin_type = use_bin_type
        self.use_single_float = use_single_float
        super().__init__(content, status_code, headers, media_type, background)

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - any msgpack-encodable payload
        """Render the content as MessagePack.

        Args:
            content: The content to serialize.

        Returns:
            bytes: The msgpack-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump()

        packed = msgpack.packb(
            content,
            default=encode_default,
            use_bin_type=self.use_bin_type,
            use_single_float=self.use_single_float,
        )
        return bytes(packed)
