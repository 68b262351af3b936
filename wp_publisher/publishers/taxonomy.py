"""
Tag and category resolution.

:class:`TermResolver` maps human-readable term names to WordPress ids,
creating missing terms on first use.  Resolved ids are cached for the
lifetime of the resolver, which the orchestrator keeps for a whole run,
so the fixed post category is looked up only once.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from wp_publisher.models.result import StepResult
from wp_publisher.utils.errors import SubResourceError, TransportError, log_message
from wp_publisher.utils.pacing import PacingPolicy
from wp_publisher.utils.tags import labels_match, normalize_label

TERM_KINDS = ("tags", "categories")


class TermResolver:
    def __init__(
        self,
        client: Any,
        pacing: Optional[PacingPolicy] = None,
        log: Callable[..., None] = log_message,
    ) -> None:
        self.client = client
        self.pacing = pacing or PacingPolicy()
        self.log = log
        self._cache: Dict[Tuple[str, str], int] = {}

    def _find_existing(self, kind: str, name: str) -> Optional[int]:
        existing = self.client.request(f"/{kind}", params={"search": name, "per_page": 100})
        for term in existing or []:
            if labels_match(term.get("name") or "", name):
                return term["id"]
        return None

    def _create(self, kind: str, name: str) -> int:
        self.pacing.before_create()
        try:
            term = self.client.request(f"/{kind}", "POST", {"name": name})
        except TransportError as e:
            # The search can miss a term whose stored name differs in escaping;
            # WordPress then reports the existing id in the error body.
            if e.error_code == "term_exists":
                term_id = (e.details.get("data") or {}).get("term_id")
                if term_id:
                    return int(term_id)
            raise
        return term["id"]

    def resolve_term(self, kind: str, name: str) -> int:
        """
        Return the id of the ``kind`` term named ``name``, creating it if needed.

        The first case-insensitive match from the remote search wins.

        :raises PublisherError: if the lookup or creation fails.
        """
        if kind not in TERM_KINDS:
            raise ValueError(f"Unknown taxonomy kind: {kind}")
        label = normalize_label(name)
        if not label:
            raise ValueError("Term name is empty")
        key = (kind, label.lower())
        if key in self._cache:
            return self._cache[key]

        term_id = self._find_existing(kind, label)
        if term_id is None:
            self.log(f"Creating {kind} term '{label}'", level="DEBUG")
            term_id = self._create(kind, label)
        self._cache[key] = term_id
        return term_id

    def try_resolve(self, kind: str, name: str) -> StepResult[int]:
        """Like :meth:`resolve_term`, with failures returned instead of raised."""
        try:
            return StepResult.success(self.resolve_term(kind, name))
        except Exception as e:
            return StepResult.failure(SubResourceError(kind, name, e))
