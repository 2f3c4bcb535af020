#!/usr/bin/env python3
"""
Constants for Red Video Reel Application

This module contains all application-wide constants to avoid hardcoded magic numbers
and improve maintainability.
"""

# Upstream Listing Constants
DEFAULT_BASE_URL = "https://www.reddit.com/r"
DEFAULT_USER_AGENT = "red-video-reel/1.0"
REDDIT_POST_BASE_URL = "https://www.reddit.com"

# Network Constants (in milliseconds)
REQUEST_TIMEOUT_MS = 5000

# Feed Engine Constants
MAX_CONSECUTIVE_EMPTY_PAGES = 5
FETCH_THREAD_COUNT = 2

# Video/Media Playback Constants (in milliseconds)
PLAYBACK_MONITOR_INTERVAL_MS = 500
VIDEO_NETWORK_CACHING_MS = 3000

# VLC Instance Arguments
VLC_INSTANCE_ARGS = ['--quiet', '--no-video-title-show']
