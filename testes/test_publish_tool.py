import copy
import json
import os
from dataclasses import replace

from wp_publisher.models.post import PostIndexEntry
from wp_publisher.publish_tool import PostState
from wp_publisher.utils.errors import NetworkError, TransportError


def entry(slug, **fields):
    fields.setdefault("title", slug.replace("-", " ").title())
    return PostIndexEntry(slug=slug, **fields)


def read_jsonl(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def test_new_post_is_created_once_with_mapped_fields(config, fake_wp, make_tool, write_post):
    write_post("hello-world", "# Hello\n\nBody text.\n")
    post = entry("hello-world", title="Hello World", excerpt="Short", date="2024-03-05", tags=["Python", "Testing"])

    outcome = make_tool(config).publish_post(post)

    assert outcome.action == "created"
    assert outcome.state is PostState.UPSERTED
    creates = fake_wp.calls_to("POST", "/posts")
    assert len(creates) == 1
    body = creates[0][3]
    assert body["title"] == "Hello World"
    assert body["slug"] == "hello-world"
    assert body["excerpt"] == "Short"
    assert body["status"] == "publish"
    assert body["date"] == "2024-03-05T00:00:00+00:00"
    assert "<h1>Hello</h1>" in body["content"]
    assert [fake_wp.terms["tags"][i] for i in body["tags"]] == ["Python", "Testing"]
    assert [fake_wp.terms["categories"][i] for i in body["categories"]] == ["Blog"]
    assert "featured_media" not in body
    assert outcome.post_id in fake_wp.posts


def test_existing_post_is_updated_not_recreated(config, fake_wp, make_tool, write_post):
    write_post("hello-world")
    post_id = fake_wp.add_post("hello-world", status="draft", title="Old title")

    outcome = make_tool(config).publish_post(entry("hello-world", title="New title"))

    assert outcome.action == "updated"
    assert outcome.post_id == post_id
    assert fake_wp.calls_to("POST", "/posts") == []
    assert len(fake_wp.calls_to("PUT", f"/posts/{post_id}")) == 1
    assert len(fake_wp.posts) == 1
    assert fake_wp.posts[post_id]["title"] == "New title"
    assert fake_wp.posts[post_id]["status"] == "publish"


def test_lookup_covers_drafts_and_pending_posts(config, fake_wp, make_tool, write_post):
    write_post("hello-world")

    make_tool(config).publish_post(entry("hello-world"))

    lookup = [c for c in fake_wp.calls_to("GET", "/posts") if "slug" in c[2]]
    assert lookup[0][2] == {"slug": "hello-world", "status": "publish,draft,pending"}


def test_missing_markdown_file_is_skipped_not_failed(config, fake_wp, make_tool, write_post, sleeps):
    write_post("present")

    summary = make_tool(config).publish_posts([entry("absent"), entry("present")])

    actions = [o.action for o in summary.outcomes]
    assert actions == ["skipped", "created"]
    assert summary.outcomes[0].state is PostState.SKIPPED
    assert summary.skipped == 1
    assert summary.failed == 0
    assert summary.exit_code == 0
    assert all(c[3] is None or c[3].get("slug") != "absent" for c in fake_wp.calls)
    assert sleeps.count(0.5) == 1


def test_failing_tag_is_omitted_and_post_still_published(config, fake_wp, make_tool, write_post):
    write_post("tagged")
    fake_wp.fail(
        "GET",
        "/tags",
        TransportError(400, "/tags", "GET", "rest_invalid_param"),
        match=lambda params, body: "Invalid" in params.get("search", ""),
    )

    outcome = make_tool(config).publish_post(entry("tagged", tags=["Valid", "🚫Invalid🚫"]))

    assert outcome.action == "created"
    body = fake_wp.calls_to("POST", "/posts")[0][3]
    assert [fake_wp.terms["tags"][i] for i in body["tags"]] == ["Valid"]
    assert len(outcome.warnings) == 1
    errors = read_jsonl(os.path.join(config.report_dir, "errors.jsonl"))
    assert errors[0]["code"] == "TAG"
    assert errors[0]["slug"] == "tagged"
    assert errors[0]["status_code"] == 400


def test_failing_category_degrades_payload(config, fake_wp, make_tool, write_post):
    write_post("plain")
    fake_wp.fail("GET", "/categories", NetworkError("Network GET /categories: reset"))

    outcome = make_tool(config).publish_post(entry("plain"))

    assert outcome.action == "created"
    assert "categories" not in fake_wp.calls_to("POST", "/posts")[0][3]


def test_rerun_creates_no_duplicates_and_no_drift(config, fake_wp, make_tool, write_post):
    write_post("a", "# A\n")
    write_post("b", "# B\n")
    entries = [
        entry("a", tags=["Python"], date="2024-01-01"),
        entry("b", tags=["python", "Web"], date="2024-01-02T08:00:00Z"),
    ]

    first = make_tool(config).publish_posts(entries)
    posts_after_first = copy.deepcopy(fake_wp.posts)
    terms_after_first = copy.deepcopy(fake_wp.terms)
    second = make_tool(config).publish_posts(entries)

    assert [o.action for o in first.outcomes] == ["created", "created"]
    assert [o.action for o in second.outcomes] == ["updated", "updated"]
    assert fake_wp.posts == posts_after_first
    assert fake_wp.terms == terms_after_first
    assert sorted(fake_wp.terms["tags"].values()) == ["Python", "Web"]


def test_missing_featured_image_publishes_without_media(config, fake_wp, make_tool, write_post):
    write_post("x")
    post = PostIndexEntry.model_validate(
        {"slug": "x", "title": "X", "featuredImage": "https://example.com/missing.jpg"}
    )

    outcome = make_tool(config).publish_post(post)

    assert outcome.action == "created"
    assert "featured_media" not in fake_wp.calls_to("POST", "/posts")[0][3]
    assert any("missing.jpg" in w for w in outcome.warnings)
    errors = read_jsonl(os.path.join(config.report_dir, "errors.jsonl"))
    assert errors[0]["code"] == "MEDIA"


def test_featured_image_is_uploaded_once_and_reused(config, fake_wp, make_tool, write_post, png_image):
    write_post("rust-tips")
    url = "https://images.example.com/rust.png"
    fake_wp.images[url] = png_image
    post = entry("rust-tips", featured_image_url=url)

    make_tool(config).publish_post(post)
    make_tool(config).publish_post(post)

    assert [u[0] for u in fake_wp.uploads] == ["rust-tips-featured.png"]
    media_id = next(iter(fake_wp.media))
    assert fake_wp.calls_to("POST", "/posts")[0][3]["featured_media"] == media_id
    put = [c for c in fake_wp.calls if c[0] == "PUT"][0]
    assert put[3]["featured_media"] == media_id


def test_failed_post_is_recorded_and_run_continues(config, fake_wp, make_tool, write_post):
    write_post("a")
    write_post("b")
    fake_wp.fail(
        "POST",
        "/posts",
        TransportError(500, "/posts", "POST", "Internal Server Error"),
        match=lambda params, body: body["slug"] == "a",
    )

    summary = make_tool(config).publish_posts([entry("a"), entry("b")])

    failed, ok = summary.outcomes
    assert failed.action == "failed"
    assert failed.state is PostState.FAILED
    assert failed.error.state == "upserted"
    assert failed.error.cause.status_code == 500
    assert ok.action == "created"
    assert summary.succeeded == 1
    assert summary.failed == 1
    assert summary.exit_code == 1
    errors = read_jsonl(os.path.join(config.report_dir, "errors.jsonl"))
    assert errors[-1]["code"] == "PUBLISH"
    assert errors[-1]["endpoint"] == "/posts"
    assert errors[-1]["state"] == "upserted"


def test_invalid_date_fails_the_post_before_any_request(config, fake_wp, make_tool, write_post):
    write_post("bad-date")

    outcome = make_tool(config).publish_post(entry("bad-date", date="someday"))

    assert outcome.action == "failed"
    assert outcome.error.state == "rendered"
    assert fake_wp.calls == []


def test_category_is_resolved_once_per_run(config, fake_wp, make_tool, write_post):
    write_post("a")
    write_post("b")
    blog_id = fake_wp.add_term("categories", "blog")

    make_tool(config).publish_posts([entry("a"), entry("b")])

    assert len(fake_wp.calls_to("GET", "/categories")) == 1
    assert fake_wp.calls_to("POST", "/categories") == []
    bodies = [c[3] for c in fake_wp.calls_to("POST", "/posts")]
    assert [b["categories"] for b in bodies] == [[blog_id], [blog_id]]


def test_pacing_between_posts_and_terms(config, fake_wp, make_tool, write_post, sleeps):
    write_post("a")
    write_post("b")

    make_tool(config).publish_posts([entry("a", tags=["One"]), entry("b")])

    assert sleeps.count(0.5) == 2
    assert sleeps.count(0.2) == 1
    # One new tag and the new category.
    assert sleeps.count(0.3) == 2


def test_limit_caps_the_number_of_posts(config, fake_wp, make_tool, write_post):
    write_post("a")
    write_post("b")

    summary = make_tool(replace(config, limit=1)).publish_posts([entry("a"), entry("b")])

    assert [o.slug for o in summary.outcomes] == ["a"]


def test_dry_run_sends_no_requests(config, fake_wp, make_tool, write_post, write_index, sleeps):
    write_post("a")
    write_index([{"slug": "a", "title": "A", "tags": ["x"], "featuredImage": "https://e.com/a.jpg"}])

    exit_code = make_tool(replace(config, dry_run=True)).run()

    assert exit_code == 0
    assert fake_wp.calls == []
    assert sleeps == []


def test_run_reports_failure_exit_code(config, fake_wp, make_tool, write_post, write_index):
    write_post("a")
    write_post("b")
    write_index([{"slug": "a", "title": "A"}, {"slug": "b", "title": "B"}])
    fake_wp.fail(
        "POST",
        "/posts",
        TransportError(500, "/posts", "POST", "Internal Server Error"),
        match=lambda params, body: body["slug"] == "a",
    )

    assert make_tool(config).run() == 1
    assert [p["slug"] for p in fake_wp.posts.values()] == ["b"]


def test_run_succeeds_when_posts_are_published_or_skipped(config, fake_wp, make_tool, write_post, write_index):
    write_post("a")
    write_index([{"slug": "a", "title": "A"}, {"slug": "gone", "title": "Gone"}])

    assert make_tool(config).run() == 0
    successes = read_jsonl(os.path.join(config.report_dir, "success.jsonl"))
    assert [(s["code"], s["slug"]) for s in successes] == [("CREATED", "a"), ("SKIPPED", "gone")]


def test_connectivity_failure_aborts_before_any_post(config, fake_wp, make_tool, write_post, write_index):
    write_post("a")
    write_index([{"slug": "a", "title": "A"}])
    fake_wp.fail("GET", "/posts", NetworkError("Network GET /posts: connection refused"))

    assert make_tool(config).run() == 1
    assert fake_wp.calls_to("POST", "/posts") == []
    assert fake_wp.calls_to("GET", "/tags") == []


def test_malformed_index_aborts_run(config, fake_wp, make_tool):
    with open(config.index_file, "w", encoding="utf-8") as f:
        f.write("{ not json")

    assert make_tool(config).run() == 1
    assert fake_wp.calls_to("POST", "/posts") == []


def test_invalid_index_entry_fails_alone(config, fake_wp, make_tool, write_post, write_index, sleeps):
    write_post("a")
    write_post("c")
    write_index(
        [
            {"slug": "a", "title": "A"},
            {"slug": "b"},
            {"slug": "a", "title": "Again"},
            {"slug": "c", "title": "C"},
        ]
    )

    tool = make_tool(config)
    summary = tool.publish_posts(tool.load_posts())

    assert [p["slug"] for p in fake_wp.posts.values()] == ["a", "c"]
    assert [o.action for o in summary.outcomes] == ["created", "failed", "failed", "created"]
    rejected = summary.outcomes[1]
    assert rejected.state is PostState.FAILED
    assert rejected.error.state == "loaded"
    assert "title" in str(rejected.error)
    assert summary.exit_code == 1
    assert sleeps.count(0.5) == 2
    errors = read_jsonl(os.path.join(config.report_dir, "errors.jsonl"))
    assert [(e["code"], e["slug"]) for e in errors] == [("PUBLISH", "b"), ("PUBLISH", "a")]


def test_run_publishes_valid_entries_next_to_invalid_one(config, fake_wp, make_tool, write_post, write_index):
    write_post("a")
    write_index([{"slug": "a", "title": "A"}, {"slug": "b"}])

    assert make_tool(config).run() == 1
    assert [p["slug"] for p in fake_wp.posts.values()] == ["a"]
