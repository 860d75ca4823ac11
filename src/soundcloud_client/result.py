"""
Two-variant outcome used wherever a decode or network step can fail.

Every parse strategy, every executed request, and every completion callback
deals in ``Result[T] = Success[T] | Failure``.  Both variants are frozen once
constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Error kinds
# ---------------------------------------------------------------------------

class APIError:
    """
    Error kind constants carried by :class:`Failure`.

    ``GENERIC`` groups the kinds the wire contract reports as one opaque
    "generic error": a missing response, an undecodable payload, or an
    authorized call made without a session.
    """

    NETWORK_ERROR = "network_error"
    DECODE_ERROR = "decode_error"
    HTTP_ERROR = "http_error"
    AUTH_EXPIRED = "auth_expired"
    REFRESH_ERROR = "refresh_error"
    NO_SESSION = "no_session"
    NO_MORE_PAGES = "no_more_pages"

    GENERIC: frozenset[str] = frozenset({NETWORK_ERROR, DECODE_ERROR, NO_SESSION})


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Successful result carrying a typed value."""

    value: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed result carrying an :class:`APIError` kind and optional context."""

    error: str
    context: Any = None
    ok: bool = field(default=False, init=False)

    @property
    def is_generic(self) -> bool:
        return self.error in APIError.GENERIC


Result = Success[T] | Failure


def decode_failure(context: Any = None) -> Failure:
    """Shorthand for the failure every parse strategy returns."""
    return Failure(error=APIError.DECODE_ERROR, context=context)
