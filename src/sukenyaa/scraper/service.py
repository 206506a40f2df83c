"""Search orchestration: fetch, parse, filter, paginate, cache."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlencode

from sukenyaa.cache.interfaces import Cache
from sukenyaa.cache.memory import InMemoryCache
from sukenyaa.config import Settings
from sukenyaa.scraper.content_filter import ContentFilter
from sukenyaa.scraper.extractors import LANGUAGE_SEARCH_TERMS
from sukenyaa.scraper.fetcher import HttpxFetcher, backoff_delay
from sukenyaa.scraper.interfaces import ListingParser, PageFetcher
from sukenyaa.scraper.parser import NyaaListingParser
from sukenyaa.shared.enums import Site, SortKey, SortOrder
from sukenyaa.shared.exceptions import FetchError
from sukenyaa.shared.models import Pagination, SearchFilters, SearchOptions, SearchResult

logger = logging.getLogger(__name__)

_SORT_PARAMS: dict[SortKey, str] = {
    SortKey.DATE: "id",
    SortKey.SIZE: "size",
    SortKey.SEEDERS: "seeders",
    SortKey.LEECHERS: "leechers",
    SortKey.DOWNLOADS: "downloads",
    SortKey.TITLE: "name",
}


class NyaaScraper:
    """Search one nyaa-style site and return filtered, paginated records.

    Pipeline per search:

    1. Build a deterministic query URL; identical inputs share a cache key.
    2. Serve from the cache when a fresh entry exists.
    3. Fetch the page. The fetcher retries on its own; this class wraps a
       whole fetcher run in an outer retry with the same backoff policy.
    4. Parse every row, run the content filter over the full page, then
       truncate to the requested limit.
    5. Cache the JSON form of the result.
    """

    def __init__(
        self,
        *,
        fetcher: PageFetcher,
        content_filter: ContentFilter,
        parser: ListingParser | None = None,
        cache: Cache | None = None,
        max_page_size: int = 75,
        search_attempts: int = 2,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 5.0,
        cache_ttl: int = 300,
        cache_namespace: str = "",
    ) -> None:
        self._fetcher = fetcher
        self._filter = content_filter
        self._parser = parser or NyaaListingParser()
        self._cache = cache if cache is not None else InMemoryCache()
        self._max_page_size = max_page_size
        self._search_attempts = search_attempts
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay
        self._cache_ttl = cache_ttl
        self._cache_namespace = cache_namespace

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        base_url: str,
        *,
        cache: Cache | None = None,
        site: Site = Site.NYAA,
    ) -> NyaaScraper:
        return cls(
            fetcher=HttpxFetcher.from_settings(settings, base_url),
            content_filter=ContentFilter.from_settings(settings, site),
            cache=cache,
            max_page_size=settings.max_page_size,
            search_attempts=settings.search_attempts,
            retry_base_delay=settings.retry_base_delay_seconds,
            retry_max_delay=settings.retry_max_delay_seconds,
            cache_ttl=settings.search_cache_ttl_seconds,
            cache_namespace=base_url.rstrip("/"),
        )

    @property
    def cache(self) -> Cache:
        return self._cache

    async def start(self) -> None:
        start = getattr(self._fetcher, "start", None)
        if callable(start):
            await start()

    async def close(self) -> None:
        close = getattr(self._fetcher, "close", None)
        if callable(close):
            await close()

    def build_search_url(self, filters: SearchFilters, options: SearchOptions) -> str:
        """Return the site-relative search URL with a fixed parameter order."""
        params: list[tuple[str, str]] = []

        terms = [filters.query or ""]
        if filters.quality:
            terms.append(filters.quality)
        if filters.language:
            terms.append(LANGUAGE_SEARCH_TERMS.get(filters.language, filters.language))
        search_query = " ".join(t.strip() for t in terms if t and t.strip())
        if search_query:
            params.append(("q", search_query))

        if filters.category:
            params.append(("c", filters.category))

        if filters.trusted_only:
            params.append(("f", "2"))
        elif filters.exclude_remakes:
            params.append(("f", "1"))

        if options.sort is not None:
            params.append(("s", _SORT_PARAMS[options.sort]))
        if options.order is not None:
            params.append(("o", "asc" if options.order == SortOrder.ASC else "desc"))

        if options.page > 1:
            params.append(("p", str(options.page)))

        query = urlencode(params)
        return f"/?{query}" if query else "/"

    def effective_limit(self, options: SearchOptions) -> int:
        return min(options.limit or self._max_page_size, self._max_page_size)

    async def search(
        self,
        filters: SearchFilters | None = None,
        options: SearchOptions | None = None,
    ) -> SearchResult:
        """Run one search.

        Args:
            filters: What to search for (unconstrained when omitted).
            options: Page, limit and sort (defaults when omitted).

        Returns:
            A ``SearchResult`` owned by the caller.

        Raises:
            FetchError: The classified failure once every retry is exhausted.
        """
        filters = filters or SearchFilters()
        options = options or SearchOptions()
        url = self.build_search_url(filters, options)
        limit = self.effective_limit(options)
        cache_key = f"search:{self._cache_namespace}{url}#limit={limit}"

        cached = await self._cache.get(cache_key)
        if cached is not None:
            logger.debug("cache hit for %s", cache_key)
            return SearchResult.model_validate(cached)

        html = await self._fetch_with_retry(url)
        page = self._parser.parse_page(html)
        allowed = self._filter.filter_records(page.records)
        items = allowed[:limit]

        current_page = options.page
        result = SearchResult(
            items=tuple(items),
            pagination=Pagination(
                current_page=current_page,
                total_pages=page.total_pages,
                total_items=max(page.row_count, page.total_pages * self._max_page_size),
                has_next=current_page < page.total_pages,
                has_prev=current_page > 1,
            ),
        )
        logger.info(
            "search %s: %d row(s), %d record(s), %d allowed, %d returned",
            url,
            page.row_count,
            len(page.records),
            len(allowed),
            len(items),
        )

        await self._cache.set(cache_key, result.model_dump(mode="json"), self._cache_ttl)
        return result

    async def check_health(self) -> bool:
        return await self._fetcher.check_health()

    async def _fetch_with_retry(self, url: str) -> str:
        for attempt in range(1, self._search_attempts + 1):
            try:
                html = await self._fetcher.fetch_page(url)
                if attempt > 1:
                    logger.info("search succeeded after retry (attempt %d) for %s", attempt, url)
                return html
            except FetchError as exc:
                if attempt >= self._search_attempts:
                    logger.error(
                        "search failed for %s after %d attempt(s) (%s): %s",
                        url,
                        attempt,
                        exc.kind.value,
                        exc.detail,
                    )
                    raise
                delay = backoff_delay(attempt, base=self._retry_base_delay, cap=self._retry_max_delay)
                logger.warning("search attempt %d failed for %s (%s), retrying in %.2fs", attempt, url, exc, delay)
                await asyncio.sleep(delay)
        raise RuntimeError("search_attempts must be >= 1")


def build_scrapers(settings: Settings, cache: Cache) -> dict[Site, NyaaScraper]:
    """Build one scraper per site variant, all sharing ``cache``."""
    return {
        Site.NYAA: NyaaScraper.from_settings(settings, settings.nyaa_base_url, cache=cache, site=Site.NYAA),
        Site.SUKEBEI: NyaaScraper.from_settings(
            settings, settings.sukebei_base_url, cache=cache, site=Site.SUKEBEI
        ),
    }
