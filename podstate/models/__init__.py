"""Core data structures for podstate."""

from podstate.models.config import CheckConfig, PodStateConfig
from podstate.models.events import PodEvent
from podstate.models.pod import EntityResult, Outcome, PodSnapshot
from podstate.models.status import (
    ContainerState,
    ContainerStateRunning,
    ContainerStateTerminated,
    ContainerStateWaiting,
    ContainerStatus,
    PodCondition,
    PodStatus,
)

__all__ = [
    "CheckConfig",
    "ContainerState",
    "ContainerStateRunning",
    "ContainerStateTerminated",
    "ContainerStateWaiting",
    "ContainerStatus",
    "EntityResult",
    "Outcome",
    "PodCondition",
    "PodEvent",
    "PodSnapshot",
    "PodStateConfig",
    "PodStatus",
]
