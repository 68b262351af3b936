"""
Markdown to HTML conversion.

Posts are written in GitHub-flavoured markdown.  Python-Markdown covers
the parts the corpus uses through extensions: fenced code blocks (emitted
as ``<pre><code class="language-xxx">`` so a client-side highlighter can
pick them up), tables and list handling closer to GFM.  Single newlines
inside a paragraph are not turned into ``<br>``.
"""

from __future__ import annotations

import markdown

__all__ = [
    "convert_markdown_to_html",
]

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def convert_markdown_to_html(text: str) -> str:
    """
    Converts a markdown document to the HTML stored as the post content.

    Args:
        text: The markdown source of one post.

    Returns:
        The rendered HTML fragment.
    """
    # A fresh instance per call; Markdown objects keep state between conversions.
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS, output_format="html")
    return md.convert(text or "")
