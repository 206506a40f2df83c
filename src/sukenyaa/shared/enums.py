"""Domain enumerations used across all modules."""

from __future__ import annotations

from enum import Enum, unique


@unique
class Site(str, Enum):
    """Upstream site variants served by one scraper instance each."""

    NYAA = "nyaa"
    SUKEBEI = "sukebei"


@unique
class SortKey(str, Enum):
    """Sort keys accepted by a search."""

    DATE = "date"
    SIZE = "size"
    SEEDERS = "seeders"
    LEECHERS = "leechers"
    DOWNLOADS = "downloads"
    TITLE = "title"


@unique
class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@unique
class FailureKind(str, Enum):
    """User-facing categories of a failed fetch."""

    NETWORK_UNREACHABLE = "network_unreachable"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    FORBIDDEN = "forbidden"
    UPSTREAM_ERROR = "upstream_error"
    UNKNOWN = "unknown"


@unique
class BackendKind(str, Enum):
    """Which cache tier answered a ``stats()`` call."""

    MEMORY = "memory"
    REDIS = "redis"
    TIERED = "redis+memory"


@unique
class SkipReason(str, Enum):
    """Why a listing row produced no record."""

    NO_TITLE_CELL = "no_title_cell"
    NO_TITLE = "no_title"
    NO_DOWNLOAD_LINK = "no_download_link"
    MALFORMED = "malformed"
