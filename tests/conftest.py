"""Shared pytest fixtures for the SukeNyaa test suite."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from sukenyaa.config import Settings
from sukenyaa.shared.models import TorrentRecord

HASH_A = "a" * 40


@pytest.fixture()
def settings() -> Settings:
    """Return a Settings instance with fast retry and no throttle."""
    return Settings(
        nyaa_base_url="https://nyaa.test",
        sukebei_base_url="https://sukebei.test",
        throttle_delay_seconds=0.0,
        retry_base_delay_seconds=0.01,
        retry_max_delay_seconds=0.05,
        redis_url="",
    )


@pytest.fixture()
def make_record() -> Callable[..., TorrentRecord]:
    def _make(**overrides: object) -> TorrentRecord:
        fields: dict[str, object] = {
            "id": HASH_A,
            "title": "One Piece Episode 1000",
            "download_link": f"magnet:?xt=urn:btih:{HASH_A}",
            "size_text": "1.5 GiB",
            "size_bytes": 1610612736,
            "seeders": 100,
            "leechers": 10,
            "downloads": 1000,
            "published_at": "2024-01-01 00:00",
            "category": "Anime",
            "subcategory": "English-translated",
            "category_code": "1_2",
            "trusted": True,
        }
        fields.update(overrides)
        return TorrentRecord(**fields)  # type: ignore[arg-type]

    return _make


def listing_row(
    title: str,
    *,
    info_hash: str | None = None,
    magnet: bool = True,
    category_code: str = "1_2",
    category_label: str = "Anime - English-translated",
    size: str = "1.4 GiB",
    date: str = "2024-01-01 12:00",
    seeders: str = "10",
    leechers: str = "2",
    downloads: str = "100",
    row_class: str = "default",
    comments: bool = False,
) -> str:
    """Render one result-table row the way the site does."""
    comment_link = '<a href="/view/1#comments" class="comments" title="3 comments">3</a>' if comments else ""
    download = ""
    if magnet:
        hash_part = info_hash if info_hash is not None else "0123456789abcdef0123456789abcdef01234567"
        download = f'<a href="magnet:?xt=urn:btih:{hash_part}&amp;dn=x"><i class="fa fa-magnet"></i></a>'
    return f"""
    <tr class="{row_class}">
      <td><a href="/?c={category_code}" title="{category_label}"><img src="/cat.png"></a></td>
      <td colspan="2">{comment_link}<a href="/view/1" title="{title}">{title[:20]}</a></td>
      <td class="text-center"><a href="/download/1.torrent"><i class="fa fa-download"></i></a>{download}</td>
      <td class="text-center">{size}</td>
      <td class="text-center">{date}</td>
      <td class="text-center">{seeders}</td>
      <td class="text-center">{leechers}</td>
      <td class="text-center">{downloads}</td>
    </tr>
    """


def listing_page(rows: list[str], *, pages: int = 1) -> str:
    """Wrap rows in a results table with a pagination control."""
    links = "".join(f'<li><a class="page-link" href="/?p={n}">{n}</a></li>' for n in range(1, pages + 1))
    return f"""
    <html><body>
      <table class="table torrent-list">
        <thead><tr><th>Category</th><th>Name</th></tr></thead>
        <tbody>{"".join(rows)}</tbody>
      </table>
      <ul class="pagination"><li><a class="page-link" href="#">&laquo;</a></li>{links}</ul>
    </body></html>
    """


@pytest.fixture()
def row() -> Callable[..., str]:
    return listing_row


@pytest.fixture()
def page() -> Callable[..., str]:
    return listing_page


@pytest.fixture()
def mock_redis() -> AsyncMock:
    """Mock async Redis client."""
    mock = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.setex = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.ping = AsyncMock(return_value=True)
    return mock
