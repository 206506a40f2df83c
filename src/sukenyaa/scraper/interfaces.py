"""Interfaces for the scraper module."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sukenyaa.scraper.parser import ParsedPage
from sukenyaa.shared.models import TorrentRecord


@runtime_checkable
class PageFetcher(Protocol):
    """Protocol for fetching listing pages from one site."""

    async def fetch_page(self, url: str) -> str:
        """Fetch a page and return its HTML.

        Args:
            url: Absolute URL or path relative to the site root.

        Returns:
            Raw HTML string.

        Raises:
            FetchError: If the page could not be fetched after retries.
        """
        ...

    async def check_health(self) -> bool:
        """Return whether the site root answers. Must not raise."""
        ...


@runtime_checkable
class ListingParser(Protocol):
    """Protocol for turning listing HTML into records."""

    def parse(self, html: str) -> list[TorrentRecord]:
        """Extract records from a listing page.

        Args:
            html: Raw HTML of one results page.

        Returns:
            Records in page order; unusable rows are dropped.
        """
        ...

    def parse_page(self, html: str) -> ParsedPage:
        """Extract records together with the raw row count and page count."""
        ...
