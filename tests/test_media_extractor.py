"""
Unit tests for media extraction.

Covers the rule order, the gifv rewrite, audio URL derivation from the
reddit_video containers, and the split between unplayable posts and
malformed ones.
"""

import copy

import pytest

from media_extractor import (
    ExtractionContractError, MediaRef, derive_audio_url, extract_batch, extract_media,
    extraction_rules, rewrite_gifv
)
from helpers import image_post, reddit_video_post


class TestImgurGifv:
    """Direct Imgur .gifv links become .mp4 without an audio track."""

    @pytest.mark.parametrize("url, expected", [
        ("https://i.imgur.com/AbCdEf.gifv", "https://i.imgur.com/AbCdEf.mp4"),
        ("http://i.imgur.com/xyz123.gifv", "http://i.imgur.com/xyz123.mp4"),
        ("https://i.imgur.com/gifvlike.gifv/", "https://i.imgur.com/gifvlike.mp4/"),
    ])
    def test_gifv_rewritten_to_mp4(self, url, expected):
        media_ref = extract_media({"url": url, "permalink": "/r/gifs/1"})

        assert media_ref.video_url == expected
        assert media_ref.audio_url is None

    def test_gifv_wins_over_reddit_video(self):
        post = reddit_video_post("ABC123")
        post["url"] = "https://i.imgur.com/AbCdEf.gifv"

        media_ref = extract_media(post)

        assert media_ref.video_url == "https://i.imgur.com/AbCdEf.mp4"
        assert media_ref.audio_url is None

    @pytest.mark.parametrize("url", [
        "https://imgur.com/AbCdEf.gifv",
        "https://i.imgur.com/a.b.gifv",
        "https://i.imgur.com/AbCdEf.gif",
        "https://i.imgur.com/AbCdEf.gifv?x=1",
    ])
    def test_non_matching_links_are_not_gifv(self, url):
        assert extract_media({"url": url}) is None

    def test_rewrite_only_touches_extension(self):
        assert rewrite_gifv("https://i.imgur.com/gifvgifv.gifv") == "https://i.imgur.com/gifvgifv.mp4"


class TestRedditVideo:
    """Each reddit_video container yields the fallback video plus the DASH audio track."""

    @pytest.mark.parametrize("field", ["media", "secure_media", "preview"])
    def test_each_container_yields_video_and_audio(self, field):
        post = reddit_video_post("ABC123", field=field)
        container = post["preview"]["reddit_video_preview"] if field == "preview" else post[field]["reddit_video"]
        container["fallback_url"] = "https://v.redd.it/ABC123/DASH_720.mp4"

        media_ref = extract_media(post)

        assert media_ref.video_url == "https://v.redd.it/ABC123/DASH_720.mp4"
        assert media_ref.audio_url == "https://v.redd.it/ABC123/DASH_audio.mp4"

    def test_media_takes_priority_over_secure_media(self):
        post = reddit_video_post("FIRST", field="media")
        post["secure_media"] = {"reddit_video": {"fallback_url": "https://v.redd.it/SECOND/DASH_480.mp4"}}

        media_ref = extract_media(post)

        assert media_ref.audio_url == "https://v.redd.it/FIRST/DASH_audio.mp4"

    def test_null_containers_fall_through(self):
        post = reddit_video_post("PREV", field="preview")
        post["media"] = None
        post["secure_media"] = {"reddit_video": None}

        media_ref = extract_media(post)

        assert media_ref.audio_url == "https://v.redd.it/PREV/DASH_audio.mp4"

    def test_query_string_is_not_part_of_the_id(self):
        assert derive_audio_url("https://v.redd.it/q1w2e3/DASH_1080.mp4?source=fallback") == \
            "https://v.redd.it/q1w2e3/DASH_audio.mp4"

    def test_post_is_kept_and_not_mutated(self):
        post = reddit_video_post("ABC123", title="A satisfying thing")
        snapshot = copy.deepcopy(post)

        media_ref = extract_media(post)

        assert post == snapshot
        assert media_ref.post is post
        assert media_ref.title == "A satisfying thing"
        assert media_ref.permalink == post["permalink"]


class TestUnplayableAndMalformed:
    """Unplayable posts give None; malformed reddit_video data raises a distinct error."""

    @pytest.mark.parametrize("post", [
        {},
        {"url": None},
        {"url": "https://example.com/article", "media": None, "secure_media": None, "preview": None},
        {"preview": {"images": []}},
        {"media": {"oembed": {}}},
    ])
    def test_no_known_shape_is_unplayable(self, post):
        assert extract_media(post) is None

    def test_missing_fallback_url_is_contract_violation(self):
        post = {"media": {"reddit_video": {"height": 720}}, "permalink": "/r/x/1"}

        with pytest.raises(ExtractionContractError) as exc_info:
            extract_media(post)

        assert exc_info.value.rule_name == "media.reddit_video"

    def test_fallback_url_without_video_id_is_contract_violation(self):
        post = {"secure_media": {"reddit_video": {"fallback_url": "https://cdn.example.com/video.mp4"}}}

        with pytest.raises(ExtractionContractError) as exc_info:
            extract_media(post)

        assert exc_info.value.url == "https://cdn.example.com/video.mp4"

    def test_contract_error_is_not_none_result(self):
        assert issubclass(ExtractionContractError, ValueError)


class TestExtractBatch:

    def test_keeps_order_and_counts_skips(self):
        bad = {"media": {"reddit_video": {"fallback_url": "https://cdn.example.com/v.mp4"}}, "permalink": "/r/x/bad"}
        posts = [reddit_video_post("ONE"), image_post(), bad, {"url": "https://i.imgur.com/Two.gifv"}]

        media_refs, unplayable, violations = extract_batch(posts)

        assert [ref.video_url for ref in media_refs] == [
            "https://v.redd.it/ONE/DASH_720.mp4?source=fallback",
            "https://i.imgur.com/Two.mp4",
        ]
        assert unplayable == 1
        assert violations == 1

    def test_empty_page(self):
        assert extract_batch([]) == ([], 0, 0)


def test_rules_registered_in_priority_order():
    assert [rule.name for rule in extraction_rules] == [
        "imgur_gifv",
        "media.reddit_video",
        "secure_media.reddit_video",
        "preview.reddit_video_preview",
    ]


def test_media_ref_equality_ignores_post():
    first = MediaRef("https://v.redd.it/a/DASH_720.mp4", None, post={"title": "one"})
    second = MediaRef("https://v.redd.it/a/DASH_720.mp4", None, post={"title": "two"})

    assert first == second
