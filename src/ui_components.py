#!/usr/bin/env python3
"""
UI Components for Red Video Reel

This module contains the widgets used by the reel window: the VLC-backed
player surface and the label describing the current video.
"""

import sys
import html
import logging

import vlc

from PyQt6.QtWidgets import QWidget, QLabel, QVBoxLayout, QSizePolicy
from PyQt6.QtCore import Qt, QTimer, pyqtSignal

from constants import (
    PLAYBACK_MONITOR_INTERVAL_MS, REDDIT_POST_BASE_URL, VIDEO_NETWORK_CACHING_MS, VLC_INSTANCE_ARGS
)

# Set up logging
logger = logging.getLogger(__name__)


class ReelPlayerWidget(QWidget):
    """
    Plays one MediaRef at a time through VLC.

    When the MediaRef carries a separate audio URL it is attached to the same
    VLC media as an input slave, so audio starts, mutes and loops together
    with the video.
    """
    playbackEnded = pyqtSignal()
    playbackFailed = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: black;")
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setAttribute(Qt.WidgetAttribute.WA_NativeWindow)

        self.vlc_instance = vlc.Instance(*VLC_INSTANCE_ARGS)
        self.vlc_player = self.vlc_instance.media_player_new()
        self.current_media_ref = None
        self.loop = False
        self._attached = False

        self.playback_monitor = QTimer(self)
        self.playback_monitor.timeout.connect(self.check_playback)

    def _attach_output(self):
        """Hand our native window to VLC for rendering."""
        if self._attached:
            return
        if sys.platform.startswith('win'):
            self.vlc_player.set_hwnd(int(self.winId()))
        elif sys.platform.startswith('linux'):
            self.vlc_player.set_xwindow(int(self.winId()))
        elif sys.platform.startswith('darwin'):
            self.vlc_player.set_nsobject(int(self.winId()))
        self._attached = True

    def play(self, media_ref, muted=True, loop=False):
        """Start playing a MediaRef, replacing whatever was playing."""
        self.stop()
        self.current_media_ref = media_ref
        self.loop = loop
        if media_ref is None:
            return

        try:
            self._attach_output()
            media = self.vlc_instance.media_new(media_ref.video_url)
            media.add_option(f':network-caching={VIDEO_NETWORK_CACHING_MS}')
            if media_ref.audio_url:
                media.add_option(f':input-slave={media_ref.audio_url}')
            self.vlc_player.set_media(media)
            media.release()

            play_result = self.vlc_player.play()
            logger.debug(f"Play result {play_result} for {media_ref.video_url}")
            self.vlc_player.audio_set_mute(muted)
            self.playback_monitor.start(PLAYBACK_MONITOR_INTERVAL_MS)
        except Exception as e:
            logger.exception(f"Error setting up video playback: {e}")
            self.playbackFailed.emit(str(e))

    def set_muted(self, muted):
        self.vlc_player.audio_set_mute(muted)

    def set_loop(self, loop):
        self.loop = loop

    def check_playback(self):
        """Restart on end when looping, otherwise report the end or the error."""
        state = self.vlc_player.get_state()
        if state == vlc.State.Ended:
            if self.loop:
                logger.debug("Video ended, looping")
                try:
                    self.vlc_player.stop()
                    self.vlc_player.play()
                except Exception as e:
                    logger.error(f"Error restarting video: {e}")
            else:
                self.playback_monitor.stop()
                self.playbackEnded.emit()
        elif state == vlc.State.Error:
            self.playback_monitor.stop()
            url = self.current_media_ref.video_url if self.current_media_ref else None
            logger.warning(f"VLC reported a playback error for {url}")
            self.playbackFailed.emit(f"Cannot play {url}")

    def stop(self):
        self.playback_monitor.stop()
        try:
            self.vlc_player.stop()
        except Exception as e:
            logger.error(f"Error stopping VLC player: {e}")

    def release(self):
        """Stop playback and release VLC resources."""
        self.stop()
        try:
            if self.vlc_player:
                self.vlc_player.release()
                self.vlc_player = None
            if self.vlc_instance:
                self.vlc_instance.release()
                self.vlc_instance = None
        except Exception as e:
            logger.error(f"Error releasing VLC resources: {e}")


class VideoInformationLabel(QLabel):
    """Shows 'Video n/total: <title>' with a link to the Reddit thread."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setTextFormat(Qt.TextFormat.RichText)
        self.setOpenExternalLinks(True)
        self.setWordWrap(True)
        self.show_media(None, 0, 0)

    def show_media(self, media_ref, video_number, total_videos):
        if media_ref is None:
            self.setText("Fetching the next set of videos...")
            return
        link = f"{REDDIT_POST_BASE_URL}{media_ref.permalink}"
        self.setText(
            f"Video {video_number}/{total_videos}: "
            f'<a href="{html.escape(link, quote=True)}">{html.escape(media_ref.title)}</a>'
        )


class ReelView(QWidget):
    """Player surface above the information line."""

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.player = ReelPlayerWidget(self)
        self.info_label = VideoInformationLabel(self)
        layout.addWidget(self.player, stretch=1)
        layout.addWidget(self.info_label)
