"""Shared fixtures for the feed engine tests."""

import pytest
from PyQt6.QtCore import QCoreApplication

from media_extractor import MediaRef
from page_fetcher import FilterParams, SortOrder

from helpers import FakeThreadPool


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    """Signals and QObjects need an application instance; no display is required."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def thread_pool():
    return FakeThreadPool()


@pytest.fixture
def params():
    return FilterParams("oddlysatisfying", SortOrder.HOT)


@pytest.fixture
def media_refs():
    return [
        MediaRef(f"https://v.redd.it/id{i}/DASH_720.mp4", f"https://v.redd.it/id{i}/DASH_audio.mp4")
        for i in range(3)
    ]
