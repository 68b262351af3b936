"""
Data models shared by the publishing pipeline.

* :class:`PostIndexEntry` / :class:`InvalidIndexEntry` – elements of the committed post index
* :class:`WordPressPost` – the payload sent to the posts endpoint
* :class:`StepResult` – outcome of a recoverable sub-step
"""

from .post import InvalidIndexEntry, PostIndexEntry, WordPressPost, to_iso_date
from .result import StepResult

__all__ = ["InvalidIndexEntry", "PostIndexEntry", "WordPressPost", "StepResult", "to_iso_date"]
