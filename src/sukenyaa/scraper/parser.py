"""Listing page parsing via BeautifulSoup."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Union

from bs4 import BeautifulSoup, Tag

from sukenyaa.scraper import extractors
from sukenyaa.shared.enums import SkipReason
from sukenyaa.shared.models import TorrentRecord

logger = logging.getLogger(__name__)

_MAGNET_HREF = re.compile(r"^magnet:")

# Column positions in the result table.
_CATEGORY_COL = 0
_NAME_COL = 1
_SIZE_COL = 3
_DATE_COL = 4
_SEEDERS_COL = 5
_LEECHERS_COL = 6
_DOWNLOADS_COL = 7


@dataclass(frozen=True)
class Parsed:
    record: TorrentRecord


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason
    detail: str = ""


RowOutcome = Union[Parsed, Skipped]


@dataclass(frozen=True)
class ParsedPage:
    """Everything the orchestrator needs from one listing page."""

    records: list[TorrentRecord] = field(default_factory=list)
    skipped: list[Skipped] = field(default_factory=list)
    row_count: int = 0
    total_pages: int = 1


class NyaaListingParser:
    """Turn a nyaa-style search results page into torrent records.

    Implements the ``ListingParser`` protocol. Parsing never raises: a row
    that cannot be turned into a record is reported as ``Skipped`` and the
    rest of the page is still processed.
    """

    def parse(self, html: str) -> list[TorrentRecord]:
        """Return the records of every usable row, in page order."""
        return self.parse_page(html).records

    def parse_rows(self, html: str) -> list[RowOutcome]:
        """Return one tagged outcome per table row."""
        soup = BeautifulSoup(html, "lxml")
        return [self._parse_row(row) for row in self._result_rows(soup)]

    def parse_page(self, html: str) -> ParsedPage:
        soup = BeautifulSoup(html, "lxml")
        rows = self._result_rows(soup)
        records: list[TorrentRecord] = []
        skipped: list[Skipped] = []
        for row in rows:
            outcome = self._parse_row(row)
            if isinstance(outcome, Parsed):
                records.append(outcome.record)
            else:
                skipped.append(outcome)

        total_pages = self._total_pages(soup)
        logger.debug(
            "parsed %d record(s) from %d row(s), %d skipped, %d page(s)",
            len(records),
            len(rows),
            len(skipped),
            total_pages,
        )
        return ParsedPage(records=records, skipped=skipped, row_count=len(rows), total_pages=total_pages)

    @staticmethod
    def _result_rows(soup: BeautifulSoup) -> list[Tag]:
        rows = soup.select("table.torrent-list > tbody > tr")
        if not rows:
            rows = soup.select("tbody tr")
        return rows

    def _parse_row(self, row: Tag) -> RowOutcome:
        try:
            return self._build_record(row)
        except Exception as exc:
            logger.warning("failed to parse torrent row: %s", exc)
            return Skipped(SkipReason.MALFORMED, str(exc))

    def _build_record(self, row: Tag) -> RowOutcome:
        cells = row.find_all("td", recursive=False) or row.find_all("td")
        if len(cells) <= _NAME_COL:
            logger.debug("skipping row without a title cell")
            return Skipped(SkipReason.NO_TITLE_CELL)
        name_cell = cells[_NAME_COL]

        title = self._title(name_cell)
        if not title:
            logger.debug("skipping row without a title")
            return Skipped(SkipReason.NO_TITLE)

        magnet_tag = row.find("a", href=_MAGNET_HREF)
        if magnet_tag is None:
            logger.debug("skipping row without a download link: %s", title[:80])
            return Skipped(SkipReason.NO_DOWNLOAD_LINK, title)
        download_link = str(magnet_tag["href"])

        record_id = extractors.extract_info_hash(download_link) or extractors.fallback_id(title)

        category_label = ""
        category_code = ""
        category_anchor = cells[_CATEGORY_COL].find("a")
        if isinstance(category_anchor, Tag):
            category_label = str(category_anchor.get("title") or "")
            category_code = extractors.extract_category_code(str(category_anchor.get("href") or ""))
        category, subcategory = extractors.split_category(category_label)

        size_text = _cell_text(cells, _SIZE_COL)

        uploader = name_cell.find("a", href=re.compile(r"/user/"))
        uploader_name = uploader.get_text(strip=True) if isinstance(uploader, Tag) else ""
        row_classes = row.get("class") or []
        uploader_classes = (uploader.get("class") or []) if isinstance(uploader, Tag) else []

        return Parsed(
            TorrentRecord(
                id=record_id,
                title=title,
                download_link=download_link,
                size_text=size_text,
                size_bytes=extractors.parse_size_to_bytes(size_text),
                seeders=extractors.coerce_count(_cell_text(cells, _SEEDERS_COL)),
                leechers=extractors.coerce_count(_cell_text(cells, _LEECHERS_COL)),
                downloads=extractors.coerce_count(_cell_text(cells, _DOWNLOADS_COL)),
                published_at=_cell_text(cells, _DATE_COL),
                category=category,
                subcategory=subcategory,
                category_code=category_code,
                uploader_name=uploader_name or "Anonymous",
                trusted="text-success" in uploader_classes or "success" in row_classes,
                is_remake="danger" in row_classes,
                quality=extractors.extract_quality(title),
                language=extractors.extract_language(title),
                resolution=extractors.extract_resolution(title),
            )
        )

    @staticmethod
    def _title(name_cell: Tag) -> str:
        # The first titled anchor is often the comments icon; the last one is the display title.
        anchors = name_cell.find_all("a", attrs={"title": True})
        if not anchors:
            return ""
        anchor = anchors[-1]
        return str(anchor.get("title") or "").strip() or anchor.get_text(strip=True)

    @staticmethod
    def _total_pages(soup: BeautifulSoup) -> int:
        max_page = 1
        for link in soup.select(".pagination .page-link, .pagination a"):
            text = link.get_text(strip=True)
            if text.isdigit():
                max_page = max(max_page, int(text))
        return max_page


def _cell_text(cells: list[Tag], index: int) -> str:
    if index >= len(cells):
        return ""
    return cells[index].get_text(strip=True)
