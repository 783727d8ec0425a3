"""Cooperative cancellation tokens for response writes.

A token is shared between whoever may abort a response (the request's own
abort signal, a caller-supplied deadline) and the code writing it. Writers
check the token before each transport message; a fired token surfaces as
``ResponseCancelledError``.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from src.core.exceptions import ResponseCancelledError


class CancellationToken:
    """Cooperative cancellation token.

    Cancelling is idempotent: the first reason and timestamp win.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self.reason: str | None = None
        self.cancelled_at: datetime | None = None
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """Return True once cancellation was requested."""
        return self._event.is_set()

    def cancel(self, reason: str = "requested") -> None:
        """Mark the token as cancelled."""
        if self._event.is_set():
            return
        self.reason = reason
        self.cancelled_at = datetime.now(UTC)
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise ResponseCancelledError if the token has fired.

        Raises:
            ResponseCancelledError: If cancellation was requested.
        """
        if self._event.is_set():
            raise ResponseCancelledError(
                reason=self.reason,
                context={"token": self.name} if self.name else None,
            )

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        await self._event.wait()

    def __repr__(self) -> str:
        state = f"cancelled, reason={self.reason!r}" if self.cancelled else "active"
        return f"CancellationToken(name={self.name!r}, {state})"
