"""Frozen Pydantic domain models shared by all modules."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from sukenyaa.shared.enums import BackendKind, SortKey, SortOrder


class TorrentRecord(BaseModel):
    """One catalog entry derived from one listing row."""

    model_config = {"frozen": True}

    id: str
    title: str
    download_link: str
    size_text: str = ""
    size_bytes: int = Field(default=0, ge=0)
    seeders: int = Field(default=0, ge=0)
    leechers: int = Field(default=0, ge=0)
    downloads: int = Field(default=0, ge=0)
    published_at: str = ""
    category: str = ""
    subcategory: str = ""
    category_code: str = ""
    uploader_name: str = "Anonymous"
    trusted: bool = False
    is_remake: bool = False
    quality: str | None = None
    language: str | None = None
    resolution: str | None = None

    @field_validator("title", "download_link")
    @classmethod
    def _required_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class SearchFilters(BaseModel):
    """What to search for. Unset fields leave the search unconstrained."""

    model_config = {"frozen": True}

    query: str | None = None
    category: str | None = None
    quality: str | None = None
    language: str | None = None
    trusted_only: bool = False
    exclude_remakes: bool = False


class SearchOptions(BaseModel):
    """Pagination and ordering of a search."""

    model_config = {"frozen": True}

    page: int = Field(default=1, ge=1)
    limit: int | None = Field(default=None, ge=1)
    sort: SortKey | None = None
    order: SortOrder | None = None


class Pagination(BaseModel):
    model_config = {"frozen": True}

    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool


class SearchResult(BaseModel):
    """Records from one listing page plus its pagination metadata."""

    model_config = {"frozen": True}

    items: tuple[TorrentRecord, ...] = ()
    pagination: Pagination


class CacheEntry(BaseModel):
    """A cached payload with its creation time (epoch seconds) and TTL."""

    model_config = {"frozen": True}

    payload: Any
    created_at: float
    ttl: int

    def is_expired(self, now: float) -> bool:
        return now > self.created_at + self.ttl


class CacheStats(BaseModel):
    model_config = {"frozen": True}

    entry_count: int
    backend_kind: BackendKind
