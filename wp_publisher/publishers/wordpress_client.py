"""
WordPress REST API transport.

This module implements the low-level interactions with the
``/wp-json/wp/v2`` API: authenticated JSON requests, raw media uploads
and image downloads from arbitrary hosts.  Every failure is translated
into the publisher's error taxonomy so callers never handle
``requests`` exceptions directly:

* non-2xx answers raise :class:`TransportError`
* connection failures raise :class:`NetworkError`
* exceeded time bounds raise :class:`RequestTimeoutError`

Usage example::

    from wp_publisher.utils.config import load_config
    from wp_publisher.publishers.wordpress_client import WordPressClient

    client = WordPressClient(load_config())
    posts = client.request("/posts", params={"per_page": 1})
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote, urljoin

import requests

from wp_publisher.utils.config import PublisherConfig
from wp_publisher.utils.errors import (
    ImageFetchError,
    NetworkError,
    RequestTimeoutError,
    TooManyRedirectsError,
    TransportError,
)

MAX_REDIRECTS = 5
SNIPPET_LENGTH = 200


@dataclass(frozen=True)
class DownloadedImage:
    content: bytes
    content_type: str


def content_disposition(filename: str) -> str:
    """
    Build an attachment ``Content-Disposition`` header for ``filename``.

    Header values must be Latin-1, so the plain ``filename`` parameter gets
    an ASCII-folded copy and the exact name travels in ``filename*``
    (RFC 5987).
    """
    folded = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    folded = folded.replace("\\", "").replace('"', "").strip() or "upload"
    if folded == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{folded}\"; filename*=UTF-8''{quote(filename, safe='')}"


def wp_headers(cfg: PublisherConfig) -> Dict[str, str]:
    """
    Construct the default headers required for WordPress API requests.

    :param cfg: The run configuration holding the credentials.
    :return: A dictionary of headers including Authorization.
    """
    return {
        "Authorization": cfg.auth_header,
        "User-Agent": cfg.user_agent,
    }


def _decode(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class WordPressClient:
    """Authenticated client for one WordPress site."""

    def __init__(self, config: PublisherConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session or requests.Session()

    def _send(self, method: str, endpoint: str, *, timeout: float, **kwargs: Any) -> Any:
        url = f"{self.config.api_base}{endpoint}"
        try:
            resp = self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.Timeout as e:
            raise RequestTimeoutError(
                f"Timeout {method} {endpoint}", endpoint=endpoint, method=method
            ) from e
        except requests.RequestException as e:
            raise NetworkError(
                f"Network {method} {endpoint}: {e}", endpoint=endpoint, method=method
            ) from e

        if not 200 <= resp.status_code < 300:
            details = _decode(resp)
            raise TransportError(
                resp.status_code,
                endpoint,
                method,
                body_snippet=resp.text[:SNIPPET_LENGTH],
                details=details if isinstance(details, dict) else None,
            )
        return _decode(resp)

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue a JSON request against ``endpoint`` (relative to the API base).

        :return: The decoded JSON body, or the raw text if it is not JSON.
        :raises TransportError: on a non-2xx answer.
        :raises NetworkError: on connection failure or timeout.
        """
        headers = {**wp_headers(self.config), "Content-Type": "application/json"}
        return self._send(
            method,
            endpoint,
            timeout=self.config.api_timeout,
            headers=headers,
            params=params,
            json=body,
        )

    def upload_media(self, content: bytes, filename: str, content_type: str) -> Any:
        """Upload raw bytes to the media library and return the created media object."""
        headers = {
            **wp_headers(self.config),
            "Content-Type": content_type,
            "Content-Disposition": content_disposition(filename),
        }
        return self._send(
            "POST",
            "/media",
            timeout=self.config.upload_timeout,
            headers=headers,
            data=content,
        )

    def download_image(self, image_url: str) -> DownloadedImage:
        """
        Download an image, following at most ``MAX_REDIRECTS`` redirects.

        No credentials are sent; the image usually lives on another host.

        :raises TooManyRedirectsError: past the redirect limit.
        :raises ImageFetchError: if the final answer is not 200.
        """
        url = image_url
        headers = {"User-Agent": self.config.user_agent}
        for _ in range(MAX_REDIRECTS + 1):
            try:
                resp = self.session.get(
                    url,
                    headers=headers,
                    timeout=self.config.upload_timeout,
                    allow_redirects=False,
                )
            except requests.Timeout as e:
                raise RequestTimeoutError(f"Timeout GET {url}", endpoint=url, method="GET") from e
            except requests.RequestException as e:
                raise NetworkError(f"Network GET {url}: {e}", endpoint=url, method="GET") from e

            location = resp.headers.get("Location")
            if 300 <= resp.status_code < 400 and location:
                url = urljoin(url, location)
                continue
            if resp.status_code != 200:
                raise ImageFetchError(f"Image download failed: {resp.status_code} {url}")
            return DownloadedImage(
                content=resp.content,
                content_type=resp.headers.get("Content-Type") or "image/jpeg",
            )
        raise TooManyRedirectsError(f"Too many redirects fetching {image_url}")
