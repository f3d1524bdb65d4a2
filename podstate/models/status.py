"""Typed pod status model decoded from a raw status payload.

Field names follow the Kubernetes ``v1.PodStatus`` schema in snake_case.
Timestamps are aware UTC datetimes, or None when absent or unparseable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PodCondition:
    """A single entry of ``status.conditions``."""

    type: str
    status: str
    reason: str | None = None
    message: str | None = None
    last_transition_time: datetime | None = None


@dataclass(frozen=True)
class ContainerStateWaiting:
    reason: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class ContainerStateRunning:
    started_at: datetime | None = None


@dataclass(frozen=True)
class ContainerStateTerminated:
    exit_code: int | None = None
    reason: str | None = None
    message: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None


@dataclass(frozen=True)
class ContainerState:
    """Container state; Kubernetes sets at most one of the three members."""

    waiting: ContainerStateWaiting | None = None
    running: ContainerStateRunning | None = None
    terminated: ContainerStateTerminated | None = None


@dataclass(frozen=True)
class ContainerStatus:
    """Status of one container or init container."""

    name: str
    image: str
    ready: bool | None = None
    restart_count: int | None = None
    state: ContainerState | None = None
    last_state: ContainerState | None = None
    image_id: str = ""
    container_id: str = ""

    @property
    def waiting(self) -> ContainerStateWaiting | None:
        return self.state.waiting if self.state is not None else None

    @property
    def running(self) -> ContainerStateRunning | None:
        return self.state.running if self.state is not None else None

    @property
    def terminated(self) -> ContainerStateTerminated | None:
        return self.state.terminated if self.state is not None else None


@dataclass(frozen=True)
class PodStatus:
    """Typed view of a pod's ``status`` object."""

    phase: str = "Unknown"
    start_time: datetime | None = None
    conditions: tuple[PodCondition, ...] = field(default_factory=tuple)
    container_statuses: tuple[ContainerStatus, ...] = field(default_factory=tuple)
    init_container_statuses: tuple[ContainerStatus, ...] = field(default_factory=tuple)
    host_ip: str | None = None
    pod_ip: str | None = None
    qos_class: str | None = None
    reason: str | None = None
    message: str | None = None

    def find_condition(self, type_: str, reason: str | None = None) -> PodCondition | None:
        """Return the first condition of *type_* (and *reason*, when given)."""
        for condition in self.conditions:
            if condition.type != type_:
                continue
            if reason is not None and condition.reason != reason:
                continue
            return condition
        return None
