#!/usr/bin/env python3
"""
Reddit Listing Fetcher for Red Video Reel

This module handles fetching pages of a subreddit listing from Reddit's public
JSON endpoints. A single page request is wrapped in a QRunnable worker so the
GUI thread never blocks; the result is reported back through Qt signals tagged
with the generation the request was issued under.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional
from urllib.parse import quote, urlencode

import requests
from PyQt6.QtCore import QObject, QRunnable, pyqtSignal, pyqtSlot

from constants import DEFAULT_USER_AGENT, REQUEST_TIMEOUT_MS

# Set up logging
logger = logging.getLogger(__name__)


class SortOrder(str, Enum):
    HOT = "hot"
    NEW = "new"
    TOP = "top"


class TimeWindow(str, Enum):
    ANY = ""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


@dataclass(frozen=True)
class FilterParams:
    """Which listing the feed shows. A new value means a new feed."""
    source: str
    order: SortOrder = SortOrder.HOT
    time_window: TimeWindow = TimeWindow.ANY

    def __post_init__(self):
        # Accept plain strings from config and widgets
        object.__setattr__(self, 'source', self.source.strip())
        object.__setattr__(self, 'order', SortOrder(self.order))
        time_window = TimeWindow(self.time_window or "")
        # The time window only selects anything on the top listing
        if self.order != SortOrder.TOP:
            time_window = TimeWindow.ANY
        object.__setattr__(self, 'time_window', time_window)


class Page(NamedTuple):
    posts: List[Dict[str, Any]]
    next_cursor: Optional[str]


class FetchError(Exception):
    """A page could not be fetched or decoded."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def build_listing_url(base_url: str, params: FilterParams, cursor: str = "") -> str:
    """
    Build the listing URL for one page.

    Args:
        base_url: Listing root, e.g. https://www.reddit.com/r
        params: Subreddit, sort order and time window
        cursor: The 'after' token of the previous page ("" for the first page)

    Returns:
        <base_url>/<source>/<order>.json?after=<cursor>[&t=<window>]
    """
    order = params.order
    query = {'after': cursor or ''}
    # Reddit only honours t= on the top listing
    if order == SortOrder.TOP and params.time_window:
        query["t"] = params.time_window.value
    source = quote(params.source, safe="")
    return f"{base_url.rstrip('/')}/{source}/{order.value}.json?{urlencode(query)}"


def build_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({
        "User-Agent": user_agent,
        "Accept": "application/json",
    })
    return session


def parse_listing(listing: Any) -> Page:
    """Pull the posts and the next cursor out of a decoded listing document."""
    try:
        data = listing["data"]
        children = data["children"]
        next_cursor = data.get("after")
    except (KeyError, TypeError, AttributeError) as e:
        raise FetchError(f"unexpected listing shape: {e!r}") from e

    if not isinstance(children, list):
        raise FetchError("unexpected listing shape: children is not a list")

    posts = []
    for child in children:
        post = child.get("data") if isinstance(child, dict) else None
        if not isinstance(post, dict):
            logger.warning(f"Skipping listing child without post data: {child!r}")
            continue
        posts.append(post)
    return Page(posts=posts, next_cursor=next_cursor)


def fetch_page(url: str, timeout_ms: int = REQUEST_TIMEOUT_MS,
               session: Optional[requests.Session] = None,
               is_cancelled: Optional[Callable[[], bool]] = None) -> Optional[Page]:
    """
    Fetch and decode one listing page. Does not retry.

    The body is streamed so a request cancelled while waiting on the server can
    drop the connection before reading it. A session created here is closed on
    return.

    Returns:
        The decoded page, or None when is_cancelled() turned true before the body was read.

    Raises:
        FetchError: On timeout, connection or HTTP errors, or a malformed body.
    """
    if session is None:
        with build_session() as own_session:
            return fetch_page(url, timeout_ms, own_session, is_cancelled)

    logger.debug(f"Fetching listing page: {url}")
    try:
        response = session.get(url, timeout=timeout_ms / 1000.0, stream=True)
        if is_cancelled is not None and is_cancelled():
            logger.debug(f"Fetch cancelled before reading the body: {url}")
            response.close()
            return None
        response.raise_for_status()
        listing = response.json()
    except requests.exceptions.Timeout as e:
        raise FetchError(f"timeout after {timeout_ms} ms: {url}") from e
    except requests.exceptions.RequestException as e:
        raise FetchError(f"request failed: {e}") from e
    except ValueError as e:
        raise FetchError(f"invalid JSON from {url}: {e}") from e

    page = parse_listing(listing)
    logger.debug(f"Fetched {len(page.posts)} posts, next cursor={page.next_cursor!r}")
    return page


# --- Worker Signals ---
class PageFetchSignals(QObject):
    """
    Signals available from a running page fetch.
    pageFetched: (generation, Page)
    fetchFailed: (generation, reason)
    """
    pageFetched = pyqtSignal(int, object)
    fetchFailed = pyqtSignal(int, str)


class PageFetchWorker(QRunnable):
    """
    Worker for fetching one listing page on the thread pool.
    Cancellation is cooperative: a worker cancelled before the pool runs it
    sends no request, one cancelled while waiting on the server closes the
    response unread, and a cancelled worker never emits.
    """
    def __init__(self, url: str, generation: int, timeout_ms: int = REQUEST_TIMEOUT_MS,
                 session: Optional[requests.Session] = None):
        super().__init__()
        self.url = url
        self.generation = generation
        self.timeout_ms = timeout_ms
        self.session = session
        self.cancelled = False
        self.signals = PageFetchSignals()

    def cancel(self) -> None:
        logger.debug(f"Cancelling page fetch (generation {self.generation}): {self.url}")
        self.cancelled = True

    @pyqtSlot()
    def run(self):
        if self.cancelled:
            logger.debug(f"Skipping cancelled fetch before it started: {self.url}")
            return
        try:
            page = fetch_page(self.url, self.timeout_ms, self.session,
                              is_cancelled=lambda: self.cancelled)
        except FetchError as e:
            if not self.cancelled:
                self.signals.fetchFailed.emit(self.generation, e.reason)
            return
        except Exception as e:
            logger.exception(f"Unexpected error fetching {self.url}: {e}")
            if not self.cancelled:
                self.signals.fetchFailed.emit(self.generation, str(e))
            return

        if page is None or self.cancelled:
            logger.debug(f"Discarding result of cancelled fetch: {self.url}")
            return
        self.signals.pageFetched.emit(self.generation, page)
