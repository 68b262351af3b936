"""
Post lookup, creation and update.

These helpers are the two halves of the upsert.  They are separate round
trips, so a post created by someone else between the lookup and the
create can still produce a duplicate; nothing here locks the remote side.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

# Drafts and pending posts are matched too so a stale draft is updated
# instead of shadowed by a second post with the same slug.
LOOKUP_STATUSES = "publish,draft,pending"


def find_existing_post(client: Any, slug: str) -> Optional[Dict[str, Any]]:
    """Return the first remote post with ``slug``, or ``None``."""
    posts = client.request("/posts", params={"slug": slug, "status": LOOKUP_STATUSES})
    if isinstance(posts, list) and posts:
        return posts[0]
    return None


def create_post(client: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
    return client.request("/posts", "POST", payload)


def update_post(client: Any, post_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return client.request(f"/posts/{post_id}", "PUT", payload)
