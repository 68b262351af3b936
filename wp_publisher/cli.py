"""
Command-line entry point.

Usage::

    WP_URL=blog.example.com WP_USERNAME=editor WP_APP_PASSWORD="xxxx xxxx"
        wp-publish [--index blogs.json] [--posts-dir posts]
        [--config config/publish_config.json] [--dry-run] [--limit 5]
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from wp_publisher.publish_tool import WordPressPublishTool
from wp_publisher.utils.config import DEFAULT_CONFIG_FILE, load_config
from wp_publisher.utils.errors import ConfigError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Flags override the ``publishing`` section of the JSON config file;
    credentials are only read from the environment.
    """
    parser = argparse.ArgumentParser(
        description="Publish the markdown posts listed in the index to WordPress."
    )
    parser.add_argument("--index", help="Path to the post index (default: blogs.json)")
    parser.add_argument("--posts-dir", help="Directory holding <slug>.md files (default: posts)")
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE, help="Optional JSON config file")
    parser.add_argument("--dry-run", action="store_true", help="Render posts without calling the API")
    parser.add_argument("--limit", type=int, help="Publish at most N posts")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(
            args.config,
            index_file=args.index,
            posts_dir=args.posts_dir,
            dry_run=True if args.dry_run else None,
            limit=args.limit,
        )
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    tool = WordPressPublishTool(config)
    return tool.run()


if __name__ == "__main__":
    sys.exit(main())
