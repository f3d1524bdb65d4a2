"""Pod and container checks, and their evaluation order.

The order of the check tuples is part of the contract: when several
conditions hold for one container, only the message of the first matching
check is reported.

Usage::

    from podstate.rules import CONTAINER_CHECKS, ContainerArgs, run_checks

    message = run_checks(ContainerArgs(now, config, pod, container), CONTAINER_CHECKS)
"""

from __future__ import annotations

from podstate.rules.base import ContainerArgs, ContainerCheck, PodArgs, run_checks
from podstate.rules.container_rules import (
    container_config_error,
    container_crash_loop_back_off,
    container_creating,
    container_image_pull_back_off,
    container_max_restarts,
    container_not_ready,
    container_oom_killed,
    container_restart_rate,
    init_container_failed,
)
from podstate.rules.pod_rules import pod_deleted, pod_unscheduled

__all__ = [
    "CONTAINER_CHECKS",
    "INIT_CONTAINER_CHECKS",
    "ContainerArgs",
    "ContainerCheck",
    "PodArgs",
    "pod_deleted",
    "pod_unscheduled",
    "run_checks",
]

INIT_CONTAINER_CHECKS: tuple[ContainerCheck, ...] = (
    container_creating,
    container_config_error,
    container_image_pull_back_off,
    container_crash_loop_back_off,
    container_oom_killed,
    container_max_restarts,
    init_container_failed,
)

CONTAINER_CHECKS: tuple[ContainerCheck, ...] = (
    container_creating,
    container_config_error,
    container_image_pull_back_off,
    container_crash_loop_back_off,
    container_oom_killed,
    container_max_restarts,
    container_not_ready,
    container_restart_rate,
)
