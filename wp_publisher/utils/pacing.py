"""
Cooperative request pacing.

WordPress hosts often enforce informal rate limits.  The publisher stays
under them by pausing at fixed points of a run rather than reacting to 429
responses.  :class:`PacingPolicy` owns those pauses so the orchestrator
never sleeps directly and tests can swap the sleep function.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional


class PacingPolicy:
    """
    Fixed-delay pacing between requests.

    ``post_interval`` is slept after each post, ``term_interval`` after
    each tag resolution and ``create_interval`` before a new taxonomy term
    is created.
    """

    def __init__(
        self,
        post_interval: float = 0.5,
        term_interval: float = 0.2,
        create_interval: float = 0.3,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        self.post_interval = max(0.0, post_interval)
        self.term_interval = max(0.0, term_interval)
        self.create_interval = max(0.0, create_interval)
        self._sleep = sleep_fn

    @classmethod
    def from_config(
        cls, section: Optional[Dict[str, Any]] = None, sleep_fn: Callable[[float], None] = time.sleep
    ) -> "PacingPolicy":
        section = section or {}
        return cls(
            post_interval=float(section.get("post_interval", 0.5)),
            term_interval=float(section.get("term_interval", 0.2)),
            create_interval=float(section.get("create_interval", 0.3)),
            sleep_fn=sleep_fn,
        )

    def _pause(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)

    def after_post(self) -> None:
        self._pause(self.post_interval)

    def after_term(self) -> None:
        self._pause(self.term_interval)

    def before_create(self) -> None:
        self._pause(self.create_interval)
