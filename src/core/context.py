"""Request context management utilities for correlation IDs and endpoint tracking."""

import uuid
from contextvars import ContextVar

# Context variables for storing request data across async boundaries
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_endpoint_name_var: ContextVar[str | None] = ContextVar("endpoint_name", default=None)


class RequestContext:
    """Manages request context using contextvars for async-safe storage.

    Holds the correlation ID set by the request context middleware and the
    name of the endpoint currently handling the request, so log records and
    error responses can be tied back to both.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context.

        Args:
            correlation_id: The correlation ID to store in the context.
        """
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context."""
        return _correlation_id_var.get()

    @staticmethod
    def set_endpoint_name(endpoint_name: str) -> None:
        """Record which endpoint is handling the current request.

        Args:
            endpoint_name: Qualified name of the endpoint class.
        """
        _endpoint_name_var.set(endpoint_name)

    @staticmethod
    def get_endpoint_name() -> str | None:
        """Get the endpoint handling the current request, if any."""
        return _endpoint_name_var.get()

    @staticmethod
    def clear() -> None:
        """Clear all context variables."""
        _correlation_id_var.set(None)
        _endpoint_name_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID for individual request tracking.

    Returns:
        str: A prefixed UUID4 string in format 'req-<uuid4>'.

    Examples:
        >>> generate_request_id().startswith('req-')
        True
    """
    return f"req-{uuid.uuid4()}"
