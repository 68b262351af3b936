"""
Exceptions and structured logging helpers for the publishing run.

The exception classes form the failure taxonomy of a run.  Only
:class:`ConfigError`, :class:`IndexFileError` and
:class:`ConnectivityError` are fatal; every other error is contained either
at the post level (:class:`PerPostError`) or at the sub-resource level
(:class:`SubResourceError`).

The logging helpers append entries to files under ``reports/publish`` so
that the outcome of a run can be reviewed or parsed afterwards:

``log_message``
    Print a ``[LEVEL]`` console line and append it to ``publish.log``.

``report_error``
    Record an error that occurred for a post in ``errors.jsonl``.

``report_ok``
    Record a successful step for a post in ``success.jsonl``.

The ``ERRORS`` dictionary maps event codes to human readable messages.
Codes not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

ERRORS: Dict[str, str] = {
    "SKIPPED": "Markdown file not found, post skipped",
    "TAG": "Failed to resolve tag",
    "CATEGORY": "Failed to resolve category",
    "MEDIA": "Failed to attach featured image",
    "PUBLISH": "Failed to publish post",
    "CREATED": "Post published successfully",
    "UPDATED": "Post updated successfully",
}

DEFAULT_REPORT_DIR = os.path.join("reports", "publish")


class PublisherError(Exception):
    """Base class for every error raised by the publisher."""


class ConfigError(PublisherError):
    """Missing or invalid configuration; raised before any network activity."""


class IndexFileError(PublisherError):
    """The post index could not be read or parsed."""


class ConnectivityError(PublisherError):
    """The initial API connectivity check failed."""


class NetworkError(PublisherError):
    """The connection to a remote host failed."""

    def __init__(self, message: str, *, endpoint: str = "", method: str = "") -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.method = method


class RequestTimeoutError(NetworkError):
    """A request did not complete within its time bound."""


class TransportError(PublisherError):
    """The REST API answered with a non-2xx status code."""

    def __init__(
        self,
        status_code: int,
        endpoint: str,
        method: str,
        body_snippet: str = "",
        details: Any = None,
    ) -> None:
        super().__init__(f"API {status_code} {method} {endpoint}: {body_snippet}")
        self.status_code = status_code
        self.endpoint = endpoint
        self.method = method
        self.body_snippet = body_snippet
        # Decoded JSON error body, when the server sent one.
        self.details = details

    @property
    def error_code(self) -> Optional[str]:
        if isinstance(self.details, dict):
            return self.details.get("code")
        return None


class ImageFetchError(PublisherError):
    """A featured image could not be downloaded."""


class TooManyRedirectsError(ImageFetchError):
    """An image download exceeded the redirect limit."""


class SubResourceError(PublisherError):
    """A tag, category or media lookup failed; the post degrades instead of failing."""

    def __init__(self, kind: str, name: str, cause: Optional[BaseException] = None) -> None:
        message = f"{kind} '{name}' could not be resolved"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.kind = kind
        self.name = name
        self.cause = cause


class PerPostError(PublisherError):
    """A single post failed; recorded and the run moves on."""

    def __init__(self, slug: str, state: str, cause: BaseException) -> None:
        super().__init__(f"{slug} failed at {state}: {cause}")
        self.slug = slug
        self.state = state
        self.cause = cause


def log_message(message: str, level: str = "INFO", *, report_dir: Optional[str] = None) -> None:
    """Print ``message`` with its level and append it to ``publish.log``."""
    print(f"[{level}] {message}")
    directory = report_dir or DEFAULT_REPORT_DIR
    os.makedirs(directory, exist_ok=True)
    with open(os.path.join(directory, "publish.log"), "a", encoding="utf-8") as f:
        f.write(f"{level}: {message}\n")


def _write_jsonl(path: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``path``."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def _error_context(exc: BaseException) -> Dict[str, Any]:
    """Pull the endpoint, method and status code out of transport errors."""
    if isinstance(exc, (PerPostError, SubResourceError)) and exc.cause is not None:
        context = _error_context(exc.cause)
        if isinstance(exc, PerPostError):
            context["state"] = exc.state
        return context
    context: Dict[str, Any] = {}
    if isinstance(exc, TransportError):
        context["status_code"] = exc.status_code
    if isinstance(exc, (TransportError, NetworkError)):
        context["endpoint"] = exc.endpoint
        context["method"] = exc.method
    return context


def report_error(
    code: str,
    post: Dict[str, Any],
    exc: Optional[BaseException] = None,
    *,
    report_dir: Optional[str] = None,
) -> None:
    """Log an error event for ``post``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    post:
        The post dictionary associated with the error.  Only the ``slug`` and
        ``title`` keys are referenced.
    exc:
        Optional exception that triggered the error.  Its text and, for
        transport failures, the endpoint and status code are included.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "slug": post.get("slug"),
        "title": post.get("title"),
    }
    if exc is not None:
        entry["error"] = str(exc)
        entry.update(_error_context(exc))
    _write_jsonl(os.path.join(report_dir or DEFAULT_REPORT_DIR, "errors.jsonl"), entry)


def report_ok(
    code: str,
    post: Dict[str, Any],
    extra: Optional[Dict[str, Any]] = None,
    *,
    report_dir: Optional[str] = None,
) -> None:
    """Log a successful event for ``post``.

    ``extra`` is merged into the entry, e.g. the remote post id.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "slug": post.get("slug"),
        "title": post.get("title"),
    }
    if extra:
        entry.update(extra)
    _write_jsonl(os.path.join(report_dir or DEFAULT_REPORT_DIR, "success.jsonl"), entry)
