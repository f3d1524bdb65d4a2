"""Container-level checks.

Each function inspects one container status and returns a lower-case
message when its condition holds. Toggles and thresholds come from
:class:`~podstate.models.config.CheckConfig`; a threshold below 1 disables
the check.
"""

from __future__ import annotations

from podstate.rules.base import ContainerArgs, seconds_since

# Restart rates are not judged until the pod has been up this many days.
_RESTART_RATE_MIN_AGE_DAYS = 0.1
# Rates below this many restarts per day disable the restart-rate check.
_RESTART_RATE_MIN_PER_DAY = 0.01

_SECONDS_PER_DAY = 86400.0


def _waiting_reason(ca: ContainerArgs) -> str | None:
    waiting = ca.container.waiting
    return waiting.reason if waiting is not None else None


def _waiting_message(ca: ContainerArgs) -> str:
    waiting = ca.container.waiting
    return (waiting.message or "") if waiting is not None else ""


def container_creating(ca: ContainerArgs) -> str | None:
    """Detect a container that has been creating for too long."""
    if ca.config.not_created_seconds < 1:
        return None
    if ca.pod.created_at is None:
        return None
    if _waiting_reason(ca) != "ContainerCreating":
        return None
    if seconds_since(ca.now, ca.pod.created_at) > ca.config.not_created_seconds:
        return f"{ca.slug} has been creating too long"
    return None


def container_config_error(ca: ContainerArgs) -> str | None:
    """Detect a container stuck in CreateContainerConfigError."""
    if not ca.config.create_container_config_error:
        return None
    if _waiting_reason(ca) == "CreateContainerConfigError":
        return f"{ca.slug} is in CreateContainerConfigError: `{_waiting_message(ca)}`"
    return None


def container_image_pull_back_off(ca: ContainerArgs) -> str | None:
    if not ca.config.image_pull_back_off:
        return None
    if _waiting_reason(ca) == "ImagePullBackOff":
        return f"{ca.slug} is in ImagePullBackOff: `{_waiting_message(ca)}`"
    return None


def container_crash_loop_back_off(ca: ContainerArgs) -> str | None:
    if not ca.config.crash_loop_back_off:
        return None
    if _waiting_reason(ca) == "CrashLoopBackOff":
        return f"{ca.slug} is in CrashLoopBackOff: `{_waiting_message(ca)}`"
    return None


def container_oom_killed(ca: ContainerArgs) -> str | None:
    if not ca.config.oom_killed:
        return None
    terminated = ca.container.terminated
    if terminated is None:
        return None
    if terminated.reason == "OOMKilled":
        return f"{ca.slug} has been OOMKilled: `{terminated.exit_code}`"
    return None


def container_max_restarts(ca: ContainerArgs) -> str | None:
    """Detect a container whose restart count reached the configured maximum."""
    if ca.config.max_restarts < 1:
        return None
    restarts = ca.container.restart_count
    if not restarts:
        return None
    if restarts >= ca.config.max_restarts:
        return f"{ca.slug} has restarted too many times: `{restarts} > {ca.config.max_restarts}`"
    return None


def init_container_failed(ca: ContainerArgs) -> str | None:
    """Detect an init container that keeps exiting with an error."""
    if not ca.init:
        return None
    if ca.config.init_container_failure_count < 1:
        return None
    terminated = ca.container.terminated
    if terminated is None or terminated.reason != "Error":
        return None
    restarts = ca.container.restart_count
    if not restarts:
        return None
    if restarts >= ca.config.init_container_failure_count:
        return f"{ca.slug} has failed too many times: `exit code {terminated.exit_code}, {restarts} restarts`"
    return None


def container_not_ready(ca: ContainerArgs) -> str | None:
    """Detect a running container that has not become ready in time.

    Terminated containers are left to the restart checks; init containers
    have no lasting readiness and are never reported here.
    """
    if ca.init:
        return None
    if ca.config.not_ready_delay_seconds < 1:
        return None
    if ca.container.waiting is not None:
        return None
    if ca.status.start_time is None:
        return None
    if ca.container.ready is not False:
        return None
    if ca.container.terminated is not None or ca.container.running is None:
        return None
    if seconds_since(ca.now, ca.status.start_time) > ca.config.not_ready_delay_seconds:
        return f"{ca.slug} is not ready"
    return None


def container_restart_rate(ca: ContainerArgs) -> str | None:
    """Detect a container restarting faster than the configured daily rate."""
    if ca.init:
        return None
    if ca.config.restarts_per_day < _RESTART_RATE_MIN_PER_DAY:
        return None
    if ca.status.start_time is None:
        return None
    restarts = ca.container.restart_count
    if not restarts:
        return None
    days = seconds_since(ca.now, ca.status.start_time) / _SECONDS_PER_DAY
    if days < _RESTART_RATE_MIN_AGE_DAYS:
        return None
    if restarts / days > ca.config.restarts_per_day:
        return f"{ca.slug} restarts have exceeded acceptable rate: {restarts} restarts over {days:.1f} days"
    return None
