from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from wp_publisher.utils.errors import SubResourceError

T = TypeVar("T")


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """
    Outcome of a recoverable sub-step (tag, category or media lookup).

    Exactly one of ``value`` or ``error`` is meaningful: a failed step
    carries the :class:`SubResourceError` and the caller decides whether it
    degrades the post or aborts it.  A successful step may still hold a
    ``None`` value (e.g. no featured image was requested).
    """

    value: Optional[T] = None
    error: Optional[SubResourceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SubResourceError) -> "StepResult[T]":
        return cls(error=error)
