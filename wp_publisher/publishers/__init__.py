"""
WordPress API interactions.

* :mod:`wp_publisher.publishers.wordpress_client` – authenticated transport
* :mod:`wp_publisher.publishers.taxonomy` – tag/category resolution
* :mod:`wp_publisher.publishers.media` – featured image attachment
* :mod:`wp_publisher.publishers.posts` – post lookup, create and update
"""

from .media import MediaAttacher
from .posts import create_post, find_existing_post, update_post
from .taxonomy import TermResolver
from .wordpress_client import DownloadedImage, WordPressClient

__all__ = [
    "DownloadedImage",
    "MediaAttacher",
    "TermResolver",
    "WordPressClient",
    "create_post",
    "find_existing_post",
    "update_post",
]
