"""Pod snapshot and per-entity evaluation result."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from podstate.models.status import PodStatus


@dataclass(frozen=True)
class PodSnapshot:
    """Immutable pod identity plus its decoded status, one per evaluation."""

    cluster: str
    namespace: str
    name: str
    status: PodStatus
    created_at: datetime | None = None


class Outcome(StrEnum):
    """Result of evaluating one pod or container in a single round."""

    PROBLEM = "problem"
    HEALTHY = "healthy"
    REMOVED = "removed"


@dataclass(frozen=True)
class EntityResult:
    """Evaluation result for one pod or container.

    ``id`` is the stable deduplication key used by notification dispatch;
    ``slug`` is the human-readable description embedded in messages.
    """

    id: str
    slug: str
    outcome: Outcome = Outcome.HEALTHY
    message: str | None = None

    @classmethod
    def healthy(cls, id: str, slug: str) -> EntityResult:
        return cls(id=id, slug=slug, outcome=Outcome.HEALTHY)

    @classmethod
    def problem(cls, id: str, slug: str, message: str) -> EntityResult:
        return cls(id=id, slug=slug, outcome=Outcome.PROBLEM, message=message)

    @classmethod
    def removed(cls, id: str, slug: str, message: str) -> EntityResult:
        return cls(id=id, slug=slug, outcome=Outcome.REMOVED, message=message)

    @property
    def error(self) -> str | None:
        """The message for problem and removed results, None when healthy."""
        if self.outcome is Outcome.HEALTHY:
            return None
        return self.message

    @property
    def is_problem(self) -> bool:
        return self.outcome is Outcome.PROBLEM
