"""
Parsers and converters used by the publishing pipeline.

Currently this subpackage exposes ``convert_markdown_to_html`` from
:mod:`wp_publisher.parsers.markdown_parser`.
"""

from .markdown_parser import convert_markdown_to_html

__all__ = ["convert_markdown_to_html"]
