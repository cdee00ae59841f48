"""
Domain errors.

`NotFoundError` is the user-visible "nothing there" condition (missing post or an
empty result set for a filter that treats emptiness as exceptional). It carries the
query context so the API can render a useful message.
"""

from __future__ import annotations

from typing import Any


class LostFoundError(Exception):
    """Base class for errors raised by the post core."""


class NotFoundError(LostFoundError):
    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class BadInputError(LostFoundError, ValueError):
    """Unparseable or out-of-range query parameters."""


class EnrichmentUnavailable(LostFoundError):
    """The reverse-geocoding collaborator failed; never propagated past the client."""
