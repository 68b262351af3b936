from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from .errors import ConnectivityError, PublisherError, TransportError


def run_wordpress_pre_flight_checks(client: Any) -> None:
    """
    Verifies that the WordPress REST API is reachable with the configured credentials.

    Args:
        client: A :class:`~wp_publisher.publishers.wordpress_client.WordPressClient`.

    Raises:
        ConnectivityError: If the connectivity request fails.
    """
    print("[INFO] Running pre-flight checks...")
    print(f"[INFO] Target: {urlparse(client.config.api_base).hostname}")

    try:
        client.request("/posts", params={"per_page": 1})
    except TransportError as e:
        if e.status_code == 401:
            raise ConnectivityError(
                "The username or application password was rejected (401)."
            ) from e
        if e.status_code == 404:
            raise ConnectivityError(
                f"The REST API was not found at {client.config.api_base} (404)."
            ) from e
        raise ConnectivityError(f"API error: {e}") from e
    except PublisherError as e:
        raise ConnectivityError(f"API error: {e}") from e

    print("[INFO] Connected OK")
