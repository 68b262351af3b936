"""
Top-level package for the markdown → WordPress publisher.

This package bundles everything required to publish a committed corpus
of markdown posts to a WordPress site: reading the post index, rendering
markdown to HTML, resolving tags and categories, attaching featured
images and creating or updating the remote posts.  Modules are split
into subpackages:

* :mod:`wp_publisher.extractors` – post index and markdown file readers
* :mod:`wp_publisher.parsers` – markdown to HTML rendering
* :mod:`wp_publisher.publishers` – WordPress REST API interactions
* :mod:`wp_publisher.models` – index entries, payloads and step results
* :mod:`wp_publisher.utils` – errors, logging, configuration and pacing

Orchestration is handled in :mod:`wp_publisher.publish_tool`.
"""

__version__ = "1.0.0"
