#!/usr/bin/env python3
"""
Feed Controller for Red Video Reel

This module ties the playlist to the listing fetcher. It owns the current
filter parameters, starts a page fetch whenever the playlist runs out of
lookahead, appends the playable media of each fetched page, and throws
everything away when the filter parameters change.

All state here is touched on the GUI thread only. Page fetches run on the
thread pool and report back through queued signals carrying the generation
they were issued under; results from an older generation are dropped.
"""

import logging
from enum import Enum
from typing import Optional

from PyQt6.QtCore import QObject, QThreadPool, pyqtSignal

from constants import DEFAULT_BASE_URL, MAX_CONSECUTIVE_EMPTY_PAGES, REQUEST_TIMEOUT_MS
from media_extractor import MediaRef, extract_batch
from page_fetcher import FilterParams, Page, PageFetchWorker, build_listing_url
from playlist import Direction, Playlist

# Set up logging
logger = logging.getLogger(__name__)


class FeedState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RESETTING = "resetting"


class FeedController(QObject):
    """
    Drives one feed: navigation, lookahead fetching and reset on filter change.
    """
    playlistChanged = pyqtSignal()
    positionChanged = pyqtSignal(int)
    fetchFailed = pyqtSignal(str)
    # No more fetches until navigation or a filter change; carries a user-facing message
    feedStalled = pyqtSignal(str)

    def __init__(self, params: FilterParams, base_url: str = DEFAULT_BASE_URL,
                 timeout_ms: int = REQUEST_TIMEOUT_MS,
                 max_consecutive_empty_pages: int = MAX_CONSECUTIVE_EMPTY_PAGES,
                 session=None, thread_pool=None, worker_factory=PageFetchWorker,
                 parent=None) -> None:
        super().__init__(parent)
        self._params = params
        self.base_url = base_url
        self.timeout_ms = timeout_ms
        self.max_consecutive_empty_pages = max_consecutive_empty_pages
        self.session = session
        self.thread_pool = thread_pool if thread_pool is not None else QThreadPool.globalInstance()
        self.worker_factory = worker_factory

        self._playlist = Playlist()
        self._state = FeedState.IDLE
        self._generation = 0
        self._fetch_in_flight = False
        self._active_worker = None
        self._exhausted = False
        self._consecutive_empty_pages = 0

    # --- Read-only state ---
    @property
    def filter_params(self) -> FilterParams:
        return self._params

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def fetch_in_flight(self) -> bool:
        return self._fetch_in_flight

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def playlist(self) -> Playlist:
        return self._playlist

    @property
    def position(self) -> int:
        return self._playlist.position

    @property
    def length(self) -> int:
        return len(self._playlist)

    # --- Commands ---
    def start(self) -> None:
        """Kick off the first fetch for the current parameters."""
        logger.info(f"Starting feed for r/{self._params.source} ({self._params.order.value})")
        self._request_more_if_needed()

    def current(self) -> Optional[MediaRef]:
        return self._playlist.current()

    def advance(self, direction: Direction) -> None:
        self._playlist.advance(direction)
        self._consecutive_empty_pages = 0
        self.positionChanged.emit(self._playlist.position)
        self._request_more_if_needed()

    def set_filter_params(self, params: FilterParams) -> None:
        """
        Switch to a different listing. Any in-flight fetch is cancelled and
        the playlist is cleared before the first page of the new feed is
        requested.
        """
        if params == self._params:
            return

        logger.info(f"Filter changed: {self._params} -> {params}")
        self._state = FeedState.RESETTING
        self._generation += 1
        if self._active_worker is not None:
            self._active_worker.cancel()
            self._active_worker = None
        self._params = params
        self._playlist.reset()
        self._fetch_in_flight = False
        self._exhausted = False
        self._consecutive_empty_pages = 0
        self._state = FeedState.IDLE

        self.playlistChanged.emit()
        self._request_more_if_needed()

    # --- Fetching ---
    def _request_more_if_needed(self) -> None:
        if not self._playlist.needs_more():
            return
        if self._exhausted:
            logger.debug("Feed exhausted; not fetching")
            return
        if self._fetch_in_flight:
            logger.debug("Fetch already in flight; dropping trigger")
            return
        if self._consecutive_empty_pages >= self.max_consecutive_empty_pages:
            return
        self._start_fetch()

    def _start_fetch(self) -> None:
        url = build_listing_url(self.base_url, self._params, self._playlist.paging_cursor)
        worker = self.worker_factory(url, self._generation, self.timeout_ms, self.session)
        worker.signals.pageFetched.connect(self._on_page_fetched)
        worker.signals.fetchFailed.connect(self._on_fetch_failed)

        self._active_worker = worker
        self._fetch_in_flight = True
        self._state = FeedState.FETCHING
        logger.debug(f"Fetching page (generation {self._generation}): {url}")
        self.thread_pool.start(worker)

    def _is_stale(self, generation: int) -> bool:
        if generation != self._generation:
            logger.debug(f"Ignoring result from generation {generation} (current {self._generation})")
            return True
        return False

    def _settle(self) -> None:
        self._active_worker = None
        self._fetch_in_flight = False
        self._state = FeedState.IDLE

    def _on_page_fetched(self, generation: int, page: Page) -> None:
        if self._is_stale(generation):
            return
        self._settle()

        media_refs, unplayable, violations = extract_batch(page.posts)
        logger.info(f"Page of {len(page.posts)} posts gave {len(media_refs)} playable "
                    f"({unplayable} unplayable, {violations} malformed)")

        if page.next_cursor is None:
            logger.info(f"Reached the end of r/{self._params.source}")
            self._exhausted = True
            next_cursor = self._playlist.paging_cursor
        else:
            next_cursor = page.next_cursor
        self._playlist.append(media_refs, next_cursor)

        if media_refs:
            self._consecutive_empty_pages = 0
        else:
            self._consecutive_empty_pages += 1
        self.playlistChanged.emit()

        if page.next_cursor is None:
            self.feedStalled.emit(f"No more videos in r/{self._params.source}")
            return

        if (self._playlist.needs_more()
                and self._consecutive_empty_pages >= self.max_consecutive_empty_pages):
            logger.warning(f"{self._consecutive_empty_pages} consecutive pages without playable media "
                           f"in r/{self._params.source}; waiting for navigation before fetching again")
            self.feedStalled.emit(f"No playable videos in the last {self._consecutive_empty_pages} pages "
                                  f"of r/{self._params.source}; press Next to keep looking")
            return
        self._request_more_if_needed()

    def _on_fetch_failed(self, generation: int, reason: str) -> None:
        if self._is_stale(generation):
            return
        self._settle()
        logger.error(f"Failed to fetch r/{self._params.source}: {reason}")
        self.fetchFailed.emit(reason)
