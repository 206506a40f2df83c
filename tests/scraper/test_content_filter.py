"""Tests for ContentFilter."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from sukenyaa.config import Settings
from sukenyaa.scraper.content_filter import ContentFilter
from sukenyaa.shared.enums import Site
from sukenyaa.shared.models import TorrentRecord

MakeRecord = Callable[..., TorrentRecord]


@pytest.fixture
def content_filter(settings: Settings) -> ContentFilter:
    return ContentFilter.from_settings(settings, Site.SUKEBEI)


class TestContentFilter:
    def test_allows_normal_content(self, content_filter: ContentFilter, make_record: MakeRecord) -> None:
        assert content_filter.is_allowed(make_record()) is True
        assert content_filter.block_reason(make_record()) is None

    def test_blocks_denylisted_keyword(self, content_filter: ContentFilter, make_record: MakeRecord) -> None:
        record = make_record(title="Some LOLI content")
        assert content_filter.is_allowed(record) is False
        assert content_filter.block_reason(record) == "keyword"

    def test_keyword_match_is_whole_word(self, content_filter: ContentFilter, make_record: MakeRecord) -> None:
        # "kid" and "teen" appear only inside longer words.
        assert content_filter.is_allowed(make_record(title="Kidou Senshi Gundam")) is True
        assert content_filter.is_allowed(make_record(title="Fourteen Days")) is True

    def test_multi_word_keyword(self, content_filter: ContentFilter, make_record: MakeRecord) -> None:
        assert content_filter.is_allowed(make_record(title="Something School Girl Something")) is False

    def test_blocks_category_prefix(self, content_filter: ContentFilter, make_record: MakeRecord) -> None:
        record = make_record(title="Normal title", category_code="1_3")
        assert content_filter.block_reason(record) == "category"

    def test_category_label_used_without_code(self, make_record: MakeRecord) -> None:
        cf = ContentFilter(blocked_keywords=["loli"], blocked_categories=["Junior"])
        record = make_record(category_code="", category="Junior Idol")
        assert cf.block_reason(record) == "category"

    def test_blocks_nsfw_categories_when_enabled(self, make_record: MakeRecord) -> None:
        cf = ContentFilter(blocked_keywords=["loli"], enable_nsfw_filter=True)
        assert cf.block_reason(make_record(category_code="6_1")) == "nsfw"

    def test_nsfw_categories_pass_when_disabled(self, make_record: MakeRecord) -> None:
        cf = ContentFilter(blocked_keywords=["loli"], enable_nsfw_filter=False)
        assert cf.is_allowed(make_record(category_code="6_1")) is True

    def test_trusted_only_mode(self, make_record: MakeRecord) -> None:
        cf = ContentFilter(blocked_keywords=["loli"], trusted_only=True)
        assert cf.is_allowed(make_record(trusted=True)) is True
        assert cf.block_reason(make_record(trusted=False)) == "untrusted"

    @pytest.mark.parametrize("nsfw", [True, False])
    @pytest.mark.parametrize("trusted_only", [True, False])
    @pytest.mark.parametrize("trusted", [True, False])
    @pytest.mark.parametrize("category_code", ["1_2", "6_0", ""])
    def test_keyword_floor_holds_under_every_configuration(
        self,
        make_record: MakeRecord,
        nsfw: bool,
        trusted_only: bool,
        trusted: bool,
        category_code: str,
    ) -> None:
        cf = ContentFilter(
            blocked_keywords=["loli", "underage"],
            blocked_categories=[],
            enable_nsfw_filter=nsfw,
            trusted_only=trusted_only,
        )
        record = make_record(title="[Group] underage thing", trusted=trusted, category_code=category_code)
        assert cf.block_reason(record) == "keyword"

    def test_keyword_checked_before_category(self, content_filter: ContentFilter, make_record: MakeRecord) -> None:
        record = make_record(title="loli", category_code="1_3")
        assert content_filter.block_reason(record) == "keyword"

    def test_requires_keywords(self) -> None:
        with pytest.raises(ValueError):
            ContentFilter(blocked_keywords=[])

    def test_filter_records_preserves_order(self, content_filter: ContentFilter, make_record: MakeRecord) -> None:
        records = [
            make_record(id="a", title="Good anime A"),
            make_record(id="b", title="loli stuff"),
            make_record(id="c", title="Good anime C"),
            make_record(id="d", title="Bad category", category_code="1_3"),
            make_record(id="e", title="Good anime E"),
        ]
        assert [r.id for r in content_filter.filter_records(records)] == ["a", "c", "e"]

    def test_filter_single_record_iff_no_rule_matches(
        self, content_filter: ContentFilter, make_record: MakeRecord
    ) -> None:
        allowed = make_record()
        blocked = make_record(category_code="6_2")
        assert content_filter.filter_records([allowed]) == [allowed]
        assert content_filter.filter_records([blocked]) == []


class TestSiteRules:
    def test_nyaa_defaults_keep_non_english_and_software(self, settings: Settings, make_record: MakeRecord) -> None:
        cf = ContentFilter.from_settings(settings, Site.NYAA)
        anime = make_record(title="Show X - 01 [1080p]", category_code="1_3")
        software = make_record(title="Some Editor 2.0", category_code="6_1")
        assert cf.filter_records([anime, software]) == [anime, software]

    def test_nyaa_keyword_floor_still_applies(self, settings: Settings, make_record: MakeRecord) -> None:
        cf = ContentFilter.from_settings(settings, Site.NYAA)
        assert cf.block_reason(make_record(title="loli thing")) == "keyword"

    def test_sukebei_defaults_block_category_and_adult_codes(
        self, settings: Settings, make_record: MakeRecord
    ) -> None:
        cf = ContentFilter.from_settings(settings, Site.SUKEBEI)
        assert cf.block_reason(make_record(title="Title", category_code="1_3")) == "category"
        assert cf.block_reason(make_record(title="Title", category_code="6_1")) == "nsfw"

    def test_nyaa_category_list_is_configurable(self, settings: Settings, make_record: MakeRecord) -> None:
        configured = settings.model_copy(update={"nyaa_blocked_categories": ["1_4"]})
        cf = ContentFilter.from_settings(configured, Site.NYAA)
        assert cf.block_reason(make_record(title="Raw show", category_code="1_4")) == "category"
        assert cf.is_allowed(make_record(title="Sub show", category_code="1_3")) is True
