#!/usr/bin/env python3
"""
Red Video Reel - Continuous Video Feed for Reddit

This is the main application file that initializes the GUI and connects all components.
It loads the configuration, creates the feed controller and the main window, and
wires navigation, filter selection and playback together.
"""

import sys
import logging
import argparse

from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QPushButton, QLineEdit, QComboBox, QCheckBox, QStatusBar
)
from PyQt6.QtCore import Qt, QThreadPool

from constants import FETCH_THREAD_COUNT
from feed_controller import FeedController
from page_fetcher import FilterParams, SortOrder, TimeWindow, build_session
from playlist import Direction
from reel_config import load_config, default_config_path, filter_params_from_config
from ui_components import ReelView

logger = logging.getLogger(__name__)

SORT_CHOICES = [("Hot", SortOrder.HOT), ("New", SortOrder.NEW), ("Top", SortOrder.TOP)]
TIME_CHOICES = [
    ("Today", TimeWindow.TODAY),
    ("This Week", TimeWindow.WEEK),
    ("This Month", TimeWindow.MONTH),
    ("This Year", TimeWindow.YEAR),
    ("Of All Time", TimeWindow.ALL),
]


class VideoReelWindow(QMainWindow):
    """
    The main application window for Red Video Reel.
    Handles layout and forwards user input to the feed controller.
    """

    def __init__(self, controller: FeedController, auto_next: bool = True, muted: bool = True) -> None:
        super().__init__()
        self.controller = controller
        self.auto_next = auto_next
        self.muted = muted
        self.playing = None

        self.init_ui()

        self.controller.playlistChanged.connect(self.refresh)
        self.controller.positionChanged.connect(self.refresh)
        self.controller.fetchFailed.connect(self.on_fetch_failed)
        self.controller.feedStalled.connect(self.on_feed_stalled)
        self.reel_view.player.playbackEnded.connect(self.on_playback_ended)
        self.reel_view.player.playbackFailed.connect(self.on_playback_failed)

    def init_ui(self) -> None:
        """Initialize the user interface components."""
        self.setWindowTitle("Red Video Reel")
        self.setMinimumSize(800, 600)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        self.reel_view = ReelView()
        main_layout.addWidget(self.reel_view, stretch=1)

        # Controls
        controls_layout = QHBoxLayout()

        self.prev_button = QPushButton("Previous")
        self.prev_button.clicked.connect(self.show_previous)
        controls_layout.addWidget(self.prev_button)

        self.next_button = QPushButton("Next")
        self.next_button.clicked.connect(self.show_next)
        controls_layout.addWidget(self.next_button)

        self.auto_next_check = QCheckBox("Auto-next")
        self.auto_next_check.setChecked(self.auto_next)
        self.auto_next_check.toggled.connect(self.on_auto_next_toggled)
        controls_layout.addWidget(self.auto_next_check)

        self.mute_check = QCheckBox("Muted")
        self.mute_check.setChecked(self.muted)
        self.mute_check.toggled.connect(self.on_muted_toggled)
        controls_layout.addWidget(self.mute_check)

        controls_layout.addStretch(1)

        # Subreddit selector
        params = self.controller.filter_params
        self.source_input = QLineEdit()
        self.source_input.setPlaceholderText("Subreddit")
        self.source_input.setText(params.source)
        self.source_input.editingFinished.connect(self.apply_filters)
        controls_layout.addWidget(self.source_input)

        self.sort_combo = QComboBox()
        for label, order in SORT_CHOICES:
            self.sort_combo.addItem(label, order.value)
        self.sort_combo.setCurrentIndex(self.sort_combo.findData(params.order.value))
        self.sort_combo.currentIndexChanged.connect(self.apply_filters)
        controls_layout.addWidget(self.sort_combo)

        self.time_combo = QComboBox()
        for label, window in TIME_CHOICES:
            self.time_combo.addItem(label, window.value)
        index = self.time_combo.findData(params.time_window.value)
        self.time_combo.setCurrentIndex(max(index, 0))
        self.time_combo.currentIndexChanged.connect(self.apply_filters)
        self.time_combo.setVisible(params.order == SortOrder.TOP)
        controls_layout.addWidget(self.time_combo)

        main_layout.addLayout(controls_layout)

        self.statusBar = QStatusBar()
        self.setStatusBar(self.statusBar)

        self.refresh()

    # --- Navigation ---
    def show_next(self) -> None:
        self.controller.advance(Direction.FORWARD)

    def show_previous(self) -> None:
        self.controller.advance(Direction.BACKWARD)

    def keyPressEvent(self, event) -> None:
        """Arrow keys step through the reel."""
        if event.key() == Qt.Key.Key_Right:
            self.show_next()
        elif event.key() == Qt.Key.Key_Left:
            self.show_previous()
        else:
            super().keyPressEvent(event)

    # --- Filters ---
    def current_filter_params(self) -> FilterParams:
        return FilterParams(self.source_input.text(), self.sort_combo.currentData(),
                            self.time_combo.currentData())

    def apply_filters(self, *args) -> None:
        """Push the selector state to the controller; unchanged values are ignored there."""
        params = self.current_filter_params()
        self.time_combo.setVisible(params.order == SortOrder.TOP)
        if not params.source:
            self.statusBar.showMessage("Please enter a subreddit name.")
            return
        self.controller.set_filter_params(params)

    # --- Playback ---
    def refresh(self, *args) -> None:
        """Sync the player and labels with the controller's current item."""
        media_ref = self.controller.current()
        position = self.controller.position
        self.prev_button.setEnabled(position > 0)
        self.reel_view.info_label.show_media(media_ref, position + 1, self.controller.length)

        if media_ref is not self.playing:
            self.playing = media_ref
            if media_ref is None:
                self.reel_view.player.stop()
            else:
                logger.info(f"Playing video {position + 1}: {media_ref.video_url}")
                self.reel_view.player.play(media_ref, muted=self.muted, loop=not self.auto_next)

    def on_playback_ended(self) -> None:
        if self.auto_next:
            self.show_next()

    def on_playback_failed(self, message: str) -> None:
        self.statusBar.showMessage(message, 5000)
        if self.auto_next:
            self.show_next()

    def on_fetch_failed(self, reason: str) -> None:
        self.statusBar.showMessage(f"Could not load videos: {reason}")

    def on_feed_stalled(self, message: str) -> None:
        self.statusBar.showMessage(message)

    def on_auto_next_toggled(self, checked: bool) -> None:
        self.auto_next = checked
        self.reel_view.player.set_loop(not checked)

    def on_muted_toggled(self, checked: bool) -> None:
        self.muted = checked
        self.reel_view.player.set_muted(checked)

    def closeEvent(self, event) -> None:
        self.reel_view.player.release()
        super().closeEvent(event)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Continuous video reel for a subreddit.")
    parser.add_argument("--config", default=default_config_path(), help="Path to config.json")
    parser.add_argument("--subreddit", help="Subreddit to open instead of the configured default")
    parser.add_argument("--sort", choices=[order.value for order in SortOrder])
    parser.add_argument("--time", choices=[window.value for window in TimeWindow if window.value])
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, str(config["log_level"]).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    params = filter_params_from_config(config)
    if args.subreddit or args.sort or args.time:
        params = FilterParams(
            args.subreddit or params.source,
            args.sort or params.order,
            args.time or params.time_window,
        )

    app = QApplication(sys.argv[:1])
    QThreadPool.globalInstance().setMaxThreadCount(FETCH_THREAD_COUNT)

    controller = FeedController(
        params,
        base_url=config["base_url"],
        timeout_ms=config["request_timeout_ms"],
        max_consecutive_empty_pages=config["max_consecutive_empty_pages"],
        session=build_session(config["user_agent"]),
    )
    window = VideoReelWindow(controller, auto_next=config["auto_next"], muted=config["muted"])
    window.show()
    controller.start()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
