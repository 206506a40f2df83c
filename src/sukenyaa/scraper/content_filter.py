"""Content-safety filtering of parsed torrent records."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from sukenyaa.shared.enums import Site
from sukenyaa.shared.models import TorrentRecord

if TYPE_CHECKING:
    from sukenyaa.config import Settings

logger = logging.getLogger(__name__)

# Adult category codes of the sukebei variant. On nyaa.si the same codes
# are Software, so they only apply to sukebei.
NSFW_CATEGORY_PREFIXES: tuple[str, ...] = ("6_0", "6_1", "6_2")


class ContentFilter:
    """Decide whether a record may be shown.

    Rules run in order and the first block wins:

    1. keyword denylist on the title (whole words, case-insensitive)
    2. blocked category prefixes
    3. adult category prefixes, when the NSFW filter is enabled
    4. untrusted uploaders, when trusted-only mode is enabled

    The keyword rule is always evaluated; no other option switches it off.
    """

    def __init__(
        self,
        *,
        blocked_keywords: Iterable[str],
        blocked_categories: Iterable[str] = (),
        enable_nsfw_filter: bool = True,
        trusted_only: bool = False,
    ) -> None:
        keywords = [k.strip() for k in blocked_keywords if k.strip()]
        if not keywords:
            raise ValueError("content filter requires at least one blocked keyword")
        alternation = "|".join(re.escape(k) for k in keywords)
        self._keyword_re = re.compile(rf"\b({alternation})\b", re.IGNORECASE)
        self._blocked_categories = tuple(c for c in blocked_categories if c)
        self._enable_nsfw_filter = enable_nsfw_filter
        self._trusted_only = trusted_only

    @classmethod
    def from_settings(cls, settings: Settings, site: Site = Site.NYAA) -> ContentFilter:
        """Build the filter for one site variant.

        The keyword denylist is shared. Category codes mean different things
        on each site, so category and adult-prefix rules are per site.
        """
        if site == Site.SUKEBEI:
            blocked_categories = settings.sukebei_blocked_categories
            enable_nsfw_filter = settings.enable_nsfw_filter
        else:
            blocked_categories = settings.nyaa_blocked_categories
            enable_nsfw_filter = False
        return cls(
            blocked_keywords=settings.blocked_keywords,
            blocked_categories=blocked_categories,
            enable_nsfw_filter=enable_nsfw_filter,
            trusted_only=settings.trusted_uploaders_only,
        )

    def block_reason(self, record: TorrentRecord) -> str | None:
        """Return the name of the rule that blocks ``record``, or None."""
        if self._keyword_re.search(record.title):
            return "keyword"

        code = record.category_code or record.category
        if any(code.startswith(prefix) for prefix in self._blocked_categories):
            return "category"

        if self._enable_nsfw_filter and code.startswith(NSFW_CATEGORY_PREFIXES):
            return "nsfw"

        if self._trusted_only and not record.trusted:
            return "untrusted"

        return None

    def is_allowed(self, record: TorrentRecord) -> bool:
        reason = self.block_reason(record)
        if reason is None:
            return True
        if reason in ("keyword", "category"):
            logger.warning("blocked torrent (%s): %s", reason, record.title[:80])
        else:
            logger.debug("filtered torrent (%s): %s", reason, record.title[:80])
        return False

    def filter_records(self, records: Sequence[TorrentRecord]) -> list[TorrentRecord]:
        """Keep the allowed records, preserving their order."""
        return [record for record in records if self.is_allowed(record)]
