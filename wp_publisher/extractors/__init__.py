"""
Readers for the local content corpus.

This subpackage loads the committed post index (``blogs.json``) into
validated entries and reads the markdown file that backs each slug.
"""

from .post_index import load_post_index, markdown_path, read_markdown

__all__ = ["load_post_index", "markdown_path", "read_markdown"]
