#!/usr/bin/env python3
"""
Video Reel Configuration Manager

This module provides helper functions for creating and loading a configuration
file (config.json) holding the reel's defaults: which subreddit to open, how to
sort it, the request timeout and the playback preferences.

Usage Example:
    from reel_config import load_config, filter_params_from_config

    config_path = "./config.json"
    config = load_config(config_path)
    params = filter_params_from_config(config)
"""

import os
import sys
import json
import logging

from constants import (
    DEFAULT_BASE_URL, DEFAULT_USER_AGENT, REQUEST_TIMEOUT_MS, MAX_CONSECUTIVE_EMPTY_PAGES
)
from page_fetcher import FilterParams, SortOrder, TimeWindow

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "base_url": DEFAULT_BASE_URL,
    "user_agent": DEFAULT_USER_AGENT,
    "default_subreddit": "oddlysatisfying",
    "default_sort": SortOrder.HOT.value,
    "default_time_span": TimeWindow.ANY.value,
    "request_timeout_ms": REQUEST_TIMEOUT_MS,
    "max_consecutive_empty_pages": MAX_CONSECUTIVE_EMPTY_PAGES,
    "auto_next": True,
    "muted": True,
    "log_level": "INFO",
}

def default_config_path():
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "config.json")

def create_config_file(config_path):
    """
    Creates a new configuration file (config.json) filled with default values.
    """
    try:
        with open(config_path, 'w') as config_file:
            json.dump(DEFAULT_CONFIG, config_file, indent=4)
        logger.info(f"Created new configuration file at {config_path}.")
    except OSError as e:
        logger.exception("Failed to create config.json: " + str(e))
        sys.exit(1)

def _positive_int(config, key):
    value = config.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        logger.warning(f"Invalid {key} {value!r} in config; using {DEFAULT_CONFIG[key]}")
        config[key] = DEFAULT_CONFIG[key]

def validate_config(config):
    """
    Fill in missing keys and replace invalid values with defaults.

    Returns:
        dict: A new, complete configuration dictionary.
    """
    merged = dict(DEFAULT_CONFIG)
    merged.update(config)

    try:
        SortOrder(merged["default_sort"])
    except ValueError:
        logger.warning(f"Unknown default_sort {merged['default_sort']!r}; using {DEFAULT_CONFIG['default_sort']}")
        merged["default_sort"] = DEFAULT_CONFIG["default_sort"]

    try:
        TimeWindow(merged["default_time_span"] or "")
    except ValueError:
        logger.warning(f"Unknown default_time_span {merged['default_time_span']!r}; ignoring")
        merged["default_time_span"] = DEFAULT_CONFIG["default_time_span"]

    _positive_int(merged, "request_timeout_ms")
    _positive_int(merged, "max_consecutive_empty_pages")

    if not str(merged.get("default_subreddit") or "").strip():
        merged["default_subreddit"] = DEFAULT_CONFIG["default_subreddit"]
    return merged

def load_config(config_path):
    """
    Loads the configuration from config.json.
    If the file does not exist, it is created with defaults.
    """
    if not os.path.exists(config_path):
        create_config_file(config_path)
    try:
        with open(config_path, 'r') as config_file:
            config = json.load(config_file)
        if not isinstance(config, dict):
            raise ValueError("top-level JSON value must be an object")
    except (OSError, ValueError) as e:
        logger.exception("Error reading configuration file: " + str(e))
        sys.exit(1)
    return validate_config(config)

def filter_params_from_config(config):
    """Build the feed's initial FilterParams from a validated config."""
    return FilterParams(
        source=config["default_subreddit"],
        order=config["default_sort"],
        time_window=config["default_time_span"],
    )
