"""Tests for loading and validating config.json."""

import json

import pytest

from page_fetcher import FilterParams, SortOrder, TimeWindow
from reel_config import DEFAULT_CONFIG, filter_params_from_config, load_config, validate_config


class TestLoadConfig:

    def test_missing_file_is_created_with_defaults(self, tmp_path):
        config_path = tmp_path / "config.json"

        config = load_config(str(config_path))

        assert config == DEFAULT_CONFIG
        assert json.loads(config_path.read_text()) == DEFAULT_CONFIG

    def test_partial_file_is_filled_from_defaults(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"default_subreddit": "videos", "default_sort": "top",
                                           "default_time_span": "week"}))

        config = load_config(str(config_path))

        assert config["default_subreddit"] == "videos"
        assert config["request_timeout_ms"] == DEFAULT_CONFIG["request_timeout_ms"]
        assert filter_params_from_config(config) == FilterParams("videos", SortOrder.TOP, TimeWindow.WEEK)

    @pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
    def test_unreadable_file_exits(self, tmp_path, content):
        config_path = tmp_path / "config.json"
        config_path.write_text(content)

        with pytest.raises(SystemExit):
            load_config(str(config_path))


class TestValidateConfig:

    def test_unknown_sort_and_window_fall_back(self):
        config = validate_config({"default_sort": "controversial", "default_time_span": "decade"})

        assert config["default_sort"] == "hot"
        assert config["default_time_span"] == ""

    @pytest.mark.parametrize("value", [0, -5, "5000", True, None])
    def test_invalid_timeout_falls_back(self, value):
        config = validate_config({"request_timeout_ms": value})
        assert config["request_timeout_ms"] == DEFAULT_CONFIG["request_timeout_ms"]

    def test_blank_subreddit_falls_back(self):
        assert validate_config({"default_subreddit": "  "})["default_subreddit"] == "oddlysatisfying"

    def test_input_not_mutated(self):
        raw = {"max_consecutive_empty_pages": -1}
        validate_config(raw)
        assert raw == {"max_consecutive_empty_pages": -1}
