import json
from html import unescape
import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from wp_publisher.publish_tool import WordPressPublishTool
from wp_publisher.publishers.wordpress_client import DownloadedImage
from wp_publisher.utils.config import PublisherConfig
from wp_publisher.utils.errors import ImageFetchError
from wp_publisher.utils.pacing import PacingPolicy


class FakeWordPress:
    """
    In-memory stand-in for WordPressClient.

    Keeps posts, tags, categories and media like a WordPress site would,
    records every call, and raises registered failures for matching calls.
    """

    def __init__(self, config):
        self.config = config
        self.posts = {}
        self.terms = {"tags": {}, "categories": {}}
        self.media = {}
        self.images = {}
        self.calls = []
        self.uploads = []
        self._failures = []
        self._next_id = 100

    def _new_id(self):
        self._next_id += 1
        return self._next_id

    def fail(self, method, endpoint, exc, match=None):
        """Raise ``exc`` for ``method endpoint`` calls where ``match(params, body)`` holds."""
        self._failures.append((method, endpoint, match, exc))

    def add_post(self, slug, status="publish", **fields):
        post_id = self._new_id()
        self.posts[post_id] = {"id": post_id, "slug": slug, "status": status, **fields}
        return post_id

    def add_term(self, kind, name):
        term_id = self._new_id()
        self.terms[kind][term_id] = name
        return term_id

    def calls_to(self, method, endpoint):
        return [c for c in self.calls if c[0] == method and c[1] == endpoint]

    def request(self, endpoint, method="GET", body=None, params=None):
        params = params or {}
        self.calls.append((method, endpoint, params, body))
        for f_method, f_endpoint, match, exc in self._failures:
            if f_method == method and f_endpoint == endpoint and (match is None or match(params, body)):
                raise exc

        if endpoint == "/posts" and method == "GET":
            if "slug" not in params:
                return list(self.posts.values())[: params.get("per_page", 10)]
            statuses = params.get("status", "publish").split(",")
            return [p for p in self.posts.values() if p["slug"] == params["slug"] and p["status"] in statuses]
        if endpoint == "/posts" and method == "POST":
            post_id = self._new_id()
            self.posts[post_id] = {"id": post_id, **body}
            return self.posts[post_id]
        if endpoint.startswith("/posts/") and method == "PUT":
            post_id = int(endpoint.rsplit("/", 1)[1])
            self.posts[post_id].update(body)
            return self.posts[post_id]

        kind = endpoint.strip("/")
        if kind in self.terms and method == "GET":
            search = params.get("search", "").lower()
            return [{"id": i, "name": n} for i, n in self.terms[kind].items() if search in unescape(n).lower()]
        if kind in self.terms and method == "POST":
            term_id = self.add_term(kind, body["name"])
            return {"id": term_id, "name": body["name"]}

        if endpoint == "/media" and method == "GET":
            search = params.get("search", "")
            return [m for m in self.media.values() if search in m["slug"] or search in m.get("title", "")][: params.get("per_page", 10)]

        raise AssertionError(f"unexpected request {method} {endpoint}")

    def upload_media(self, content, filename, content_type):
        self.uploads.append((filename, content_type, content))
        media_id = self._new_id()
        self.media[media_id] = {
            "id": media_id,
            "slug": filename.rsplit(".", 1)[0],
            "source_url": f"https://blog.example.com/wp-content/uploads/{filename}",
        }
        return self.media[media_id]

    def download_image(self, image_url):
        self.calls.append(("DOWNLOAD", image_url, {}, None))
        if image_url not in self.images:
            raise ImageFetchError(f"Image download failed: 404 {image_url}")
        return self.images[image_url]


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config(tmp_path):
    return PublisherConfig(
        site_url="https://blog.example.com",
        username="editor",
        app_password="abcd efgh ijkl",
        index_file=str(tmp_path / "blogs.json"),
        posts_dir=str(tmp_path / "posts"),
        report_dir=str(tmp_path / "reports"),
    )


@pytest.fixture
def fake_wp(config):
    return FakeWordPress(config)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def pacing(sleeps):
    return PacingPolicy(sleep_fn=sleeps.append)


@pytest.fixture
def make_tool(fake_wp, pacing):
    def _make(config):
        return WordPressPublishTool(config, client=fake_wp, pacing=pacing)

    return _make


@pytest.fixture
def write_post(config):
    def _write(slug, text="# Hello\n\nSome *markdown* body.\n"):
        os.makedirs(config.posts_dir, exist_ok=True)
        with open(os.path.join(config.posts_dir, f"{slug}.md"), "w", encoding="utf-8") as f:
            f.write(text)

    return _write


@pytest.fixture
def write_index(config):
    def _write(posts):
        with open(config.index_file, "w", encoding="utf-8") as f:
            json.dump({"posts": posts}, f)

    return _write


@pytest.fixture
def png_image():
    return DownloadedImage(content=b"\x89PNG fake bytes", content_type="image/png")
