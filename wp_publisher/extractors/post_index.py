import json
import os

from pydantic import ValidationError

from wp_publisher.models.post import InvalidIndexEntry, PostIndexEntry
from wp_publisher.utils.errors import IndexFileError


def _validation_reason(error):
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'entry'}: {err['msg']}"
        for err in error.errors()
    )


def load_post_index(file_path):
    """Read the committed post index and validate its entries.

    The index is a JSON object with a ``posts`` array.  Each element is
    validated on its own into a
    :class:`~wp_publisher.models.post.PostIndexEntry`; an element that
    fails validation, or repeats a slug seen earlier in the file, becomes
    an :class:`~wp_publisher.models.post.InvalidIndexEntry` so the rest of
    the index can still be published.

    Args:
        file_path (str): Path to the index file (usually ``blogs.json``).

    Returns:
        list: Valid and invalid entries in file order.

    Raises:
        IndexFileError: If the file is missing or unreadable, is not valid
            JSON, or has no ``posts`` array.
    """
    try:
        with open(file_path, mode='r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise IndexFileError(f"Post index not found: {file_path}") from e
    except json.JSONDecodeError as e:
        raise IndexFileError(f"Malformed JSON in {file_path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise IndexFileError(f"Cannot read post index {file_path}: {e}") from e

    raw_posts = data.get("posts") if isinstance(data, dict) else None
    if not isinstance(raw_posts, list):
        raise IndexFileError(f"Invalid post index {file_path}: expected a 'posts' array")

    entries = []
    seen = set()
    for position, raw in enumerate(raw_posts, start=1):
        try:
            entry = PostIndexEntry.model_validate(raw)
        except ValidationError as e:
            entries.append(InvalidIndexEntry.from_raw(position, raw, _validation_reason(e)))
            continue
        if entry.slug in seen:
            entries.append(InvalidIndexEntry.from_raw(position, raw, f"duplicate slug {entry.slug!r}"))
            continue
        seen.add(entry.slug)
        entries.append(entry)
    return entries


def markdown_path(posts_dir, slug):
    """Return the path of the markdown file backing ``slug``."""
    return os.path.join(posts_dir, f"{slug}.md")


def read_markdown(posts_dir, slug):
    """Return the markdown text for ``slug``, or ``None`` if the file is absent."""
    path = markdown_path(posts_dir, slug)
    if not os.path.exists(path):
        return None
    with open(path, mode='r', encoding='utf-8') as f:
        return f.read()
