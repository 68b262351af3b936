"""
Run configuration.

Credentials come from the environment (``WP_URL``, ``WP_USERNAME``,
``WP_APP_PASSWORD``).  Publishing options (dry run, limit, paths, pacing)
may be supplied in an optional JSON file::

    {
      "publishing": {"dry_run": false, "limit": null, "category": "Blog",
                     "index_file": "blogs.json", "posts_dir": "posts"},
      "pacing": {"post_interval": 0.5, "term_interval": 0.2,
                 "create_interval": 0.3}
    }

The resulting :class:`PublisherConfig` is built once at startup and passed
to the client and the orchestrator.
"""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError, DEFAULT_REPORT_DIR

DEFAULT_CONFIG_FILE = os.path.join("config", "publish_config.json")
REQUIRED_ENV = ("WP_URL", "WP_USERNAME", "WP_APP_PASSWORD")
USER_AGENT = "TechBlog-Publisher/1.0"


def normalize_site_url(value: str) -> str:
    """Trim, drop trailing slashes and default the scheme to https."""
    url = (value or "").strip().rstrip("/")
    if url and not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url


@dataclass(frozen=True)
class PublisherConfig:
    site_url: str
    username: str
    app_password: str
    category: str = "Blog"
    index_file: str = "blogs.json"
    posts_dir: str = "posts"
    report_dir: str = DEFAULT_REPORT_DIR
    dry_run: bool = False
    limit: Optional[int] = None
    api_timeout: float = 30.0
    upload_timeout: float = 60.0
    user_agent: str = USER_AGENT
    pacing: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise ConfigError(f"Invalid limit: {self.limit} (must be 0 or more)")

    @property
    def api_base(self) -> str:
        return f"{self.site_url}/wp-json/wp/v2"

    @property
    def auth_header(self) -> str:
        token = base64.b64encode(f"{self.username}:{self.app_password}".encode("utf-8")).decode("ascii")
        return f"Basic {token}"


def _read_config_file(config_file: Optional[str]) -> Dict[str, Any]:
    if not config_file or not os.path.exists(config_file):
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_file}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a JSON object")
    return data


def load_config(
    config_file: Optional[str] = DEFAULT_CONFIG_FILE,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> PublisherConfig:
    """
    Build the run configuration from the environment and ``config_file``.

    Keyword ``overrides`` (CLI flags) take precedence over the file; values
    of ``None`` are ignored.

    :raises ConfigError: if a required environment variable is missing or
        the config file is malformed.
    """
    env = os.environ if environ is None else environ
    values = {key: (env.get(key) or "").strip() for key in REQUIRED_ENV}
    missing = [key for key, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing: {', '.join(missing)}")

    data = _read_config_file(config_file)
    publishing = dict(data.get("publishing") or {})
    publishing.update({k: v for k, v in overrides.items() if v is not None})

    limit = publishing.get("limit")
    if limit is not None:
        try:
            limit = int(limit)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid limit: {limit!r}") from e

    return PublisherConfig(
        site_url=normalize_site_url(values["WP_URL"]),
        username=values["WP_USERNAME"],
        app_password=values["WP_APP_PASSWORD"],
        category=publishing.get("category") or "Blog",
        index_file=publishing.get("index_file") or "blogs.json",
        posts_dir=publishing.get("posts_dir") or "posts",
        report_dir=publishing.get("report_dir") or DEFAULT_REPORT_DIR,
        dry_run=bool(publishing.get("dry_run", False)),
        limit=limit,
        pacing=dict(data.get("pacing") or {}),
    )
