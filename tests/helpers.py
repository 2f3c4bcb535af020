"""Post builders and worker helpers shared by the tests."""

from page_fetcher import Page


class FakeThreadPool:
    """Holds started workers instead of running them, so tests decide when they settle."""

    def __init__(self):
        self.started = []

    def start(self, worker):
        self.started.append(worker)

    @property
    def last(self):
        return self.started[-1]


def reddit_video_post(video_id, field="media", title=None):
    """A post whose video lives in one of the reddit_video containers."""
    container = {"fallback_url": f"https://v.redd.it/{video_id}/DASH_720.mp4?source=fallback"}
    post = {
        "title": title or f"Video {video_id}",
        "permalink": f"/r/test/comments/{video_id.lower()}/video/",
        "url": f"https://v.redd.it/{video_id}",
    }
    if field == "preview":
        post["preview"] = {"reddit_video_preview": container}
    else:
        post[field] = {"reddit_video": container}
    return post


def image_post(post_id="img1"):
    return {
        "title": "Just a picture",
        "permalink": f"/r/test/comments/{post_id}/pic/",
        "url": f"https://i.redd.it/{post_id}.jpg",
        "media": None,
        "secure_media": None,
    }


def make_page(posts, next_cursor="t3_next"):
    return Page(posts=list(posts), next_cursor=next_cursor)


def settle(worker, page):
    worker.signals.pageFetched.emit(worker.generation, page)


def fail(worker, reason="timeout"):
    worker.signals.fetchFailed.emit(worker.generation, reason)
