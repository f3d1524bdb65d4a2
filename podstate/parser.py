"""Pod status payload decoding.

Converts the raw JSON status carried by a pod event into the typed
:class:`~podstate.models.status.PodStatus` model. Any string in the payload
that looks like a Kubernetes UTC timestamp is converted to an aware
``datetime``, regardless of which field it appears in.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from typing import Any

from podstate.errors import MalformedStatusError
from podstate.models.events import PodEvent
from podstate.models.pod import PodSnapshot
from podstate.models.status import (
    ContainerState,
    ContainerStateRunning,
    ContainerStateTerminated,
    ContainerStateWaiting,
    ContainerStatus,
    PodCondition,
    PodStatus,
)

# Year must not start with 0, so "0001-01-01T00:00:00Z" stays a string.
_TIMESTAMP_RE = re.compile(
    r"[1-9]\d*-[01]\d-[0-3]\dT[0-2]\d:[0-5]\d:[0-5]\d(?:\.(\d+))?Z",
    re.ASCII,
)


def parse_timestamp(value: str) -> datetime | None:
    """Return an aware UTC datetime for a timestamp string, else None.

    Strings that match the timestamp pattern but name an impossible date
    (month 19, day 39, five-digit years) also return None.
    """
    match = _TIMESTAMP_RE.fullmatch(value)
    if match is None:
        return None
    whole = value[:-1].split(".", 1)[0]
    try:
        parsed = datetime.strptime(whole, "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        return None
    fraction = match.group(1)
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0
    return parsed.replace(microsecond=microsecond, tzinfo=UTC)


def convert_timestamps(value: Any) -> Any:
    """Return a copy of *value* with timestamp strings replaced by datetimes.

    Nested objects and arrays are walked with an explicit stack.
    """
    root = [value]
    pending: list[tuple[list[Any] | dict[Any, Any], Any]] = [(root, 0)]
    while pending:
        parent, key = pending.pop()
        item = parent[key]
        if isinstance(item, dict):
            copied: dict[Any, Any] = dict(item)
            parent[key] = copied
            pending.extend((copied, k) for k in copied)
        elif isinstance(item, list):
            items = list(item)
            parent[key] = items
            pending.extend((items, i) for i in range(len(items)))
        elif isinstance(item, str):
            converted = parse_timestamp(item)
            if converted is not None:
                parent[key] = converted
    return root[0]


def parse_pod_status(raw: str | bytes | None) -> PodStatus:
    """Decode a raw JSON pod status into a :class:`PodStatus`.

    Raises:
        MalformedStatusError: if the payload is absent, is not valid JSON,
            is not a JSON object, or has fields of the wrong shape.
    """
    if not raw:
        raise MalformedStatusError("Pod status payload is empty")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedStatusError(f"Pod status is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise MalformedStatusError("Pod status is nested too deeply") from exc
    if not isinstance(data, dict):
        raise MalformedStatusError(f"Pod status must be a JSON object, got {type(data).__name__}")
    return pod_status_from_dict(convert_timestamps(data))


def pod_status_from_dict(data: dict[str, Any]) -> PodStatus:
    """Build a PodStatus from an already decoded, timestamp-converted dict."""
    conditions = tuple(_condition(item) for item in _list(data, "conditions"))
    return PodStatus(
        phase=_str(data.get("phase")) or "Unknown",
        start_time=_time(data.get("startTime")),
        conditions=conditions,
        container_statuses=tuple(_container_status(item) for item in _list(data, "containerStatuses")),
        init_container_statuses=tuple(_container_status(item) for item in _list(data, "initContainerStatuses")),
        host_ip=_str(data.get("hostIP")),
        pod_ip=_str(data.get("podIP")),
        qos_class=_str(data.get("qosClass")),
        reason=_str(data.get("reason")),
        message=_str(data.get("message")),
    )


def snapshot_from_event(event: PodEvent) -> PodSnapshot:
    """Combine an incoming pod event with its decoded status.

    Raises:
        MalformedStatusError: if the event's status payload cannot be decoded.
    """
    status = parse_pod_status(event.status_json)
    created_at = parse_timestamp(event.timestamp) if event.timestamp else None
    return PodSnapshot(
        cluster=event.cluster_name,
        namespace=event.namespace,
        name=event.name,
        status=status,
        created_at=created_at,
    )


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedStatusError(f"Pod status field {key!r} must be a list, got {type(value).__name__}")
    return value


def _object(data: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise MalformedStatusError(f"Pod status field {key!r} must be an object, got {type(value).__name__}")
    return value


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _time(value: Any) -> datetime | None:
    return value if isinstance(value, datetime) else None


def _condition(item: Any) -> PodCondition:
    if not isinstance(item, dict):
        raise MalformedStatusError("Pod condition must be an object")
    return PodCondition(
        type=_str(item.get("type")) or "",
        status=_str(item.get("status")) or "",
        reason=_str(item.get("reason")),
        message=_str(item.get("message")),
        last_transition_time=_time(item.get("lastTransitionTime")),
    )


def _container_state(data: dict[str, Any], key: str) -> ContainerState | None:
    state = _object(data, key)
    if state is None:
        return None
    waiting = _object(state, "waiting")
    running = _object(state, "running")
    terminated = _object(state, "terminated")
    return ContainerState(
        waiting=(
            ContainerStateWaiting(reason=_str(waiting.get("reason")), message=_str(waiting.get("message")))
            if waiting is not None
            else None
        ),
        running=ContainerStateRunning(started_at=_time(running.get("startedAt"))) if running is not None else None,
        terminated=(
            ContainerStateTerminated(
                exit_code=_int(terminated.get("exitCode")),
                reason=_str(terminated.get("reason")),
                message=_str(terminated.get("message")),
                started_at=_time(terminated.get("startedAt")),
                finished_at=_time(terminated.get("finishedAt")),
            )
            if terminated is not None
            else None
        ),
    )


def _container_status(item: Any) -> ContainerStatus:
    if not isinstance(item, dict):
        raise MalformedStatusError("Container status must be an object")
    return ContainerStatus(
        name=_str(item.get("name")) or "",
        image=_str(item.get("image")) or "",
        ready=_bool(item.get("ready")),
        restart_count=_int(item.get("restartCount")),
        state=_container_state(item, "state"),
        last_state=_container_state(item, "lastState"),
        image_id=_str(item.get("imageID")) or "",
        container_id=_str(item.get("containerID")) or "",
    )
