#!/usr/bin/env python3
"""
Media Extraction for Red Video Reel

This module maps raw Reddit post records onto playable media references.
Posts come in several shapes (direct Imgur .gifv links, or one of the
reddit_video containers), so extraction is driven by an ordered registry of
rules. The first rule whose predicate accepts a post produces its MediaRef.

Extraction is pure: no network access and no mutation of the post.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

# Set up logging
logger = logging.getLogger(__name__)

IMGUR_GIFV_PATTERN = re.compile(r'^https?://i\.imgur\.com/[^.]+\.gifv/?$')
GIFV_EXTENSION_PATTERN = re.compile(r'\.gifv(/?)$')
REDDIT_VIDEO_ID_PATTERN = re.compile(r'redd\.it/([^/?#]+)')
REDDIT_AUDIO_URL_TEMPLATE = "https://v.redd.it/{video_id}/DASH_audio.mp4"


class ExtractionContractError(ValueError):
    """
    Raised when a post carries a reddit_video container whose fallback URL
    does not have the shape needed to derive the audio track.
    """

    def __init__(self, rule_name: str, url: Optional[str], message: str):
        super().__init__(f"{rule_name}: {message} (url={url!r})")
        self.rule_name = rule_name
        self.url = url


@dataclass(frozen=True)
class MediaRef:
    """A directly playable video, plus the audio track to play alongside it."""
    video_url: str
    audio_url: Optional[str]
    post: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def title(self) -> str:
        return self.post.get('title') or ''

    @property
    def permalink(self) -> str:
        return self.post.get('permalink') or ''


class ExtractionRule(NamedTuple):
    name: str
    predicate: Callable[[Dict[str, Any]], bool]
    transform: Callable[[Dict[str, Any]], MediaRef]


# Ordered registry, evaluated first-match-wins.
extraction_rules: List[ExtractionRule] = []

def register_rule(name, predicate, transform):
    """Append an extraction rule; rules registered earlier take priority."""
    extraction_rules.append(ExtractionRule(name, predicate, transform))


def _dig(post, path):
    """Follow a key path through nested dicts, returning None on any gap."""
    node = post
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


# --- Imgur .gifv Rule ---
def rewrite_gifv(url: str) -> str:
    """Swap a trailing .gifv extension for .mp4, keeping any trailing slash."""
    return GIFV_EXTENSION_PATTERN.sub(r'.mp4\1', url)

def _is_imgur_gifv(post):
    url = post.get('url')
    return isinstance(url, str) and IMGUR_GIFV_PATTERN.match(url) is not None

def _imgur_gifv_media(post):
    return MediaRef(video_url=rewrite_gifv(post['url']), audio_url=None, post=post)

register_rule("imgur_gifv", _is_imgur_gifv, _imgur_gifv_media)


# --- Reddit Video Rules ---
def derive_audio_url(fallback_url: str, rule_name: str = "reddit_video") -> str:
    """
    Build the DASH audio URL that accompanies a v.redd.it video.

    Args:
        fallback_url: The reddit_video fallback_url, e.g.
            https://v.redd.it/ABC123/DASH_720.mp4?source=fallback
        rule_name: Rule reported in the error if the URL has the wrong shape

    Returns:
        https://v.redd.it/<id>/DASH_audio.mp4

    Raises:
        ExtractionContractError: If no video id follows the redd.it host marker.
    """
    match = REDDIT_VIDEO_ID_PATTERN.search(fallback_url or '')
    if not match:
        raise ExtractionContractError(rule_name, fallback_url, "no video id after redd.it")
    return REDDIT_AUDIO_URL_TEMPLATE.format(video_id=match.group(1))

def _reddit_video_rule(name, path):
    def predicate(post):
        return _dig(post, path) is not None

    def transform(post):
        container = _dig(post, path)
        fallback_url = container.get('fallback_url') if isinstance(container, dict) else None
        if not fallback_url or not isinstance(fallback_url, str):
            raise ExtractionContractError(name, fallback_url, "container has no fallback_url")
        return MediaRef(
            video_url=fallback_url,
            audio_url=derive_audio_url(fallback_url, name),
            post=post,
        )

    register_rule(name, predicate, transform)

_reddit_video_rule("media.reddit_video", ('media', 'reddit_video'))
_reddit_video_rule("secure_media.reddit_video", ('secure_media', 'reddit_video'))
_reddit_video_rule("preview.reddit_video_preview", ('preview', 'reddit_video_preview'))


def extract_media(post: Dict[str, Any]) -> Optional[MediaRef]:
    """
    Map one post onto a MediaRef.

    Returns None when no rule recognises the post. Raises
    ExtractionContractError when a rule matched but the post data did not
    have the shape that rule relies on.
    """
    for rule in extraction_rules:
        if rule.predicate(post):
            return rule.transform(post)
    logger.debug(f"Unhandled reddit post: {post.get('permalink')}")
    return None


def extract_batch(posts) -> Tuple[List[MediaRef], int, int]:
    """
    Run extraction over a page of posts, keeping upstream order.

    Contract violations are logged and the offending post skipped, so one bad
    record never aborts the page.

    Returns:
        (media_refs, unplayable_count, violation_count)
    """
    media_refs = []
    unplayable = 0
    violations = 0
    for post in posts:
        try:
            media_ref = extract_media(post)
        except ExtractionContractError as e:
            violations += 1
            logger.warning(f"Skipping post {post.get('permalink')}: {e}")
            continue
        if media_ref is None:
            unplayable += 1
            continue
        media_refs.append(media_ref)
    return media_refs, unplayable, violations
