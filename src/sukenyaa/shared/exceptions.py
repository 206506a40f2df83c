"""Hierarchical exception types for the SukeNyaa pipeline."""

from __future__ import annotations

from sukenyaa.shared.enums import FailureKind


class SukeNyaaError(Exception):
    """Base exception for all SukeNyaa errors."""


# ── Fetching ───────────────────────────────────────────────────


class FetchError(SukeNyaaError):
    """A listing page could not be fetched.

    ``str(exc)`` is always the user-facing message. The underlying transport
    problem is kept in ``detail`` for logs and chained as ``__cause__``.
    """

    kind: FailureKind = FailureKind.UNKNOWN
    user_message: str = "Search failed for unknown reasons after all retry attempts."

    def __init__(self, detail: str = "") -> None:
        super().__init__(self.user_message)
        self.detail = detail


class NetworkUnreachableError(FetchError):
    """Connection refused or DNS resolution failed."""

    kind = FailureKind.NETWORK_UNREACHABLE
    user_message = "Network connection error. Check your internet connection or try switching networks."


class FetchTimeoutError(FetchError):
    """The request did not complete within the per-attempt timeout."""

    kind = FailureKind.TIMEOUT
    user_message = "Request timed out repeatedly. Check your network connection and try again later."


class RateLimitedError(FetchError):
    """The site answered 429 or reported rate limiting."""

    kind = FailureKind.RATE_LIMITED
    user_message = "Too many requests. Please wait several minutes before trying again."


class ForbiddenError(FetchError):
    """The site answered 403."""

    kind = FailureKind.FORBIDDEN
    user_message = "Access restricted. Your network may be blocking the site."


class UpstreamError(FetchError):
    """The site answered with another non-2xx status."""

    kind = FailureKind.UPSTREAM_ERROR
    user_message = "The site is temporarily unavailable. Try again later."


class UnknownFetchError(FetchError):
    """Any other transport failure."""


# ── Cache ──────────────────────────────────────────────────────


class CacheBackendError(SukeNyaaError):
    """Failed to communicate with an external cache backend."""
