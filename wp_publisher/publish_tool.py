"""
High-level orchestration of a publishing run.

This module defines a :class:`WordPressPublishTool` class that ties
together the index extractor, the markdown parser and the WordPress
publishers into a complete pipeline.  For each index entry it reads the
markdown file, renders it, resolves tags, the fixed category and the
featured image, then creates the remote post or updates the one that
already carries the slug.

Posts are processed strictly one after another.  A failing post is
recorded and the run moves on; tag, category and image failures only
degrade the payload of their post.  Only configuration, index and
connectivity errors stop a run.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Union

from wp_publisher.extractors.post_index import load_post_index, read_markdown
from wp_publisher.models.post import InvalidIndexEntry, PostIndexEntry, WordPressPost, to_iso_date
from wp_publisher.parsers.markdown_parser import convert_markdown_to_html
from wp_publisher.publishers.media import MediaAttacher
from wp_publisher.publishers.posts import create_post, find_existing_post, update_post
from wp_publisher.publishers.taxonomy import TermResolver
from wp_publisher.publishers.wordpress_client import WordPressClient
from wp_publisher.utils.config import PublisherConfig
from wp_publisher.utils.errors import (
    ConnectivityError,
    IndexFileError,
    PerPostError,
    SubResourceError,
    log_message,
    report_error,
    report_ok,
)
from wp_publisher.utils.pacing import PacingPolicy
from wp_publisher.utils.pre_flight_checks import run_wordpress_pre_flight_checks
from wp_publisher.utils.tags import clean_tag_names


class PostState(str, enum.Enum):
    LOADED = "loaded"
    RENDERED = "rendered"
    TAXONOMY_RESOLVED = "taxonomy_resolved"
    MEDIA_RESOLVED = "media_resolved"
    UPSERTED = "upserted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class PostOutcome:
    slug: str
    title: str
    state: PostState = PostState.LOADED
    # created, updated, skipped, failed or dry-run
    action: Optional[str] = None
    post_id: Optional[int] = None
    error: Optional[PerPostError] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.action in ("created", "updated", "dry-run")


@dataclass
class RunSummary:
    outcomes: List[PostOutcome] = field(default_factory=list)

    def _count(self, action: str) -> int:
        return sum(1 for o in self.outcomes if o.action == action)

    @property
    def created(self) -> int:
        return self._count("created")

    @property
    def updated(self) -> int:
        return self._count("updated")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


class WordPressPublishTool:
    """
    Encapsulates the state of one publishing run: the configuration, the
    API client, the pacing policy and the term cache shared by all posts.
    Collaborators can be injected for testing; by default they are built
    from ``config``.
    """

    def __init__(
        self,
        config: PublisherConfig,
        *,
        client: Any = None,
        pacing: Optional[PacingPolicy] = None,
        renderer: Callable[[str], str] = convert_markdown_to_html,
    ) -> None:
        self.config = config
        self.client = client if client is not None else WordPressClient(config)
        self.pacing = pacing or PacingPolicy.from_config(config.pacing)
        self.renderer = renderer
        self.terms = TermResolver(self.client, self.pacing, log=self.log_message)
        self.media = MediaAttacher(self.client, log=self.log_message)

    def log_message(self, message: str, level: str = "INFO") -> None:
        log_message(message, level, report_dir=self.config.report_dir)

    def check_connectivity(self) -> None:
        run_wordpress_pre_flight_checks(self.client)

    def load_posts(self, index_file: Optional[str] = None) -> List[Union[PostIndexEntry, InvalidIndexEntry]]:
        path = index_file or self.config.index_file
        posts = load_post_index(path)
        self.log_message(f"Found {len(posts)} posts in {path}")
        return posts

    def reject_entry(self, entry: InvalidIndexEntry) -> PostOutcome:
        """Record an index element that failed validation as a failed post."""
        error = PerPostError(entry.slug, PostState.LOADED.value, ValueError(entry.reason))
        self.log_message(f"  Failed: entry {entry.position} ({entry.slug}) - {entry.reason}", level="ERROR")
        report_error("PUBLISH", entry.describe(), error, report_dir=self.config.report_dir)
        return PostOutcome(
            slug=entry.slug,
            title=entry.title,
            state=PostState.FAILED,
            action="failed",
            error=error,
        )

    def _degrade(self, entry: PostIndexEntry, outcome: PostOutcome, code: str, error: SubResourceError) -> None:
        outcome.warnings.append(str(error))
        self.log_message(f"    {error}", level="WARNING")
        report_error(code, entry.describe(), error, report_dir=self.config.report_dir)

    def _resolve_tags(self, entry: PostIndexEntry, outcome: PostOutcome) -> List[int]:
        tag_ids: List[int] = []
        for name in clean_tag_names(entry.tags):
            result = self.terms.try_resolve("tags", name)
            if result.ok:
                tag_ids.append(result.value)
            else:
                self._degrade(entry, outcome, "TAG", result.error)
            self.pacing.after_term()
        return tag_ids

    def _resolve_categories(self, entry: PostIndexEntry, outcome: PostOutcome) -> List[int]:
        result = self.terms.try_resolve("categories", self.config.category)
        if not result.ok:
            self._degrade(entry, outcome, "CATEGORY", result.error)
            return []
        return [result.value]

    def _resolve_media(self, entry: PostIndexEntry, outcome: PostOutcome) -> Optional[int]:
        result = self.media.ensure_featured_media(entry.slug, entry.featured_image_url)
        if not result.ok:
            self._degrade(entry, outcome, "MEDIA", result.error)
            return None
        return result.value

    def publish_post(self, entry: PostIndexEntry) -> PostOutcome:
        """
        Run one index entry through the pipeline.

        Never raises for post-level problems: the returned
        :class:`PostOutcome` tells whether the post was created, updated,
        skipped or failed, and at which state a failure happened.
        """
        outcome = PostOutcome(slug=entry.slug, title=entry.title)
        stage = PostState.LOADED
        try:
            markdown_text = read_markdown(self.config.posts_dir, entry.slug)
            if markdown_text is None:
                outcome.state = PostState.SKIPPED
                outcome.action = "skipped"
                self.log_message(f'  Skipping "{entry.slug}" - file not found', level="WARNING")
                report_ok("SKIPPED", entry.describe(), report_dir=self.config.report_dir)
                return outcome

            stage = PostState.RENDERED
            html = self.renderer(markdown_text)
            date = to_iso_date(entry.date)
            outcome.state = stage

            if self.config.dry_run:
                outcome.action = "dry-run"
                self.log_message(
                    f'  Dry-run: would publish "{entry.title}" '
                    f"({len(html)} chars, {len(entry.tags)} tags, "
                    f"featured image: {'yes' if entry.featured_image_url else 'no'})"
                )
                return outcome

            stage = PostState.TAXONOMY_RESOLVED
            tag_ids = self._resolve_tags(entry, outcome)
            category_ids = self._resolve_categories(entry, outcome)
            outcome.state = stage

            stage = PostState.MEDIA_RESOLVED
            featured_media = self._resolve_media(entry, outcome)
            outcome.state = stage

            stage = PostState.UPSERTED
            payload = WordPressPost(
                title=entry.title,
                slug=entry.slug,
                content=html,
                excerpt=entry.excerpt,
                status="publish",
                date=date,
                tags=tag_ids,
                categories=category_ids,
                featured_media=featured_media,
            ).to_payload()

            existing = find_existing_post(self.client, entry.slug)
            if existing:
                remote = update_post(self.client, existing["id"], payload)
                outcome.action = "updated"
                self.log_message(f'  Updated: "{entry.title}"')
            else:
                remote = create_post(self.client, payload)
                outcome.action = "created"
                self.log_message(f'  Published: "{entry.title}"')
            outcome.post_id = remote.get("id") if isinstance(remote, dict) else None
            if outcome.post_id is None and existing:
                outcome.post_id = existing["id"]
            outcome.state = stage
            report_ok(
                outcome.action.upper(),
                entry.describe(),
                {"post_id": outcome.post_id, "warnings": outcome.warnings},
                report_dir=self.config.report_dir,
            )
        except Exception as e:
            error = PerPostError(entry.slug, stage.value, e)
            outcome.state = PostState.FAILED
            outcome.action = "failed"
            outcome.error = error
            self.log_message(f'  Failed: "{entry.title}" - {e}', level="ERROR")
            report_error("PUBLISH", entry.describe(), error, report_dir=self.config.report_dir)
        return outcome

    def publish_posts(self, entries: Iterable[Union[PostIndexEntry, InvalidIndexEntry]]) -> RunSummary:
        entries = list(entries)
        if self.config.limit is not None:
            entries = entries[: self.config.limit]

        summary = RunSummary()
        for i, entry in enumerate(entries, start=1):
            self.log_message(f"[{i}/{len(entries)}] {entry.slug}")
            if isinstance(entry, InvalidIndexEntry):
                summary.outcomes.append(self.reject_entry(entry))
                continue
            outcome = self.publish_post(entry)
            summary.outcomes.append(outcome)
            if not self.config.dry_run and outcome.action != "skipped":
                self.pacing.after_post()

        self.log_message(
            f"Done! {summary.created} published, {summary.updated} updated, "
            f"{summary.skipped} skipped, {summary.failed} failed."
        )
        return summary

    def run(self) -> int:
        """Execute a full run and return the process exit code."""
        self.log_message(f"Publishing to: {self.config.site_url}")
        try:
            if self.config.dry_run:
                self.log_message("Dry-run: no requests will be sent.")
            else:
                self.check_connectivity()
            entries = self.load_posts()
        except (ConnectivityError, IndexFileError) as e:
            self.log_message(str(e), level="ERROR")
            return 1
        return self.publish_posts(entries).exit_code
