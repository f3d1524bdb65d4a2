"""Check arguments and the first-match check chain.

Every container check is a pure function of :class:`ContainerArgs` that
returns a message when its condition holds and None otherwise. Checks never
raise: missing data means the condition does not apply.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from podstate.models.config import CheckConfig
from podstate.models.pod import PodSnapshot
from podstate.models.status import ContainerStatus, PodStatus
from podstate.naming import container_slug, uc_first


@dataclass(frozen=True)
class PodArgs:
    """Inputs shared by all checks for one pod evaluation."""

    now: datetime
    config: CheckConfig
    pod: PodSnapshot

    @property
    def status(self) -> PodStatus:
        return self.pod.status


@dataclass(frozen=True)
class ContainerArgs(PodArgs):
    """Inputs for a single container check."""

    container: ContainerStatus
    init: bool = False

    @property
    def slug(self) -> str:
        return container_slug(self.pod, self.container, self.init)


ContainerCheck = Callable[[ContainerArgs], str | None]


def seconds_since(now: datetime, then: datetime) -> float:
    """Return the number of seconds elapsed from *then* to *now*."""
    return (now - then).total_seconds()


def run_checks(args: ContainerArgs, checks: Sequence[ContainerCheck]) -> str | None:
    """Run *checks* in order and return the first message, capitalised.

    Checks after the first match are not evaluated.
    """
    for check in checks:
        message = check(args)
        if message:
            return uc_first(message)
    return None
