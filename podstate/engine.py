"""Pod evaluation: assembles the ordered per-entity result list.

Evaluation order (each step may end the evaluation):
  1. Namespace scope filter; an out-of-scope pod yields no results.
  2. Deletion; a deleted pod yields removal results for itself and its
     regular containers and nothing else.
  3. Scheduling; an unschedulable pod past its delay yields only the pod
     result.
  4. Init containers in declaration order. If any has a problem, regular
     containers are not evaluated.
  5. Regular containers in declaration order, each independently.

The engine is pure: no I/O, no logging, no state between calls.
"""

from __future__ import annotations

from datetime import datetime

from podstate.models.config import CheckConfig
from podstate.models.events import PodEvent
from podstate.models.pod import EntityResult, PodSnapshot
from podstate.naming import container_id, container_slug
from podstate.parser import snapshot_from_event
from podstate.rules import (
    CONTAINER_CHECKS,
    INIT_CONTAINER_CHECKS,
    ContainerArgs,
    ContainerCheck,
    PodArgs,
    pod_deleted,
    pod_unscheduled,
    run_checks,
)
from podstate.scope import namespace_in_scope


def _check_container(pa: PodArgs, ca: ContainerArgs, checks: tuple[ContainerCheck, ...]) -> EntityResult:
    c_id = container_id(pa.pod, ca.container, ca.init)
    slug = container_slug(pa.pod, ca.container, ca.init)
    message = run_checks(ca, checks)
    if message is None:
        return EntityResult.healthy(c_id, slug)
    return EntityResult.problem(c_id, slug, message)


def _any_problem(results: list[EntityResult]) -> bool:
    return any(r.is_problem for r in results)


def check_pod_state(pod: PodSnapshot, config: CheckConfig, now: datetime) -> list[EntityResult]:
    """Evaluate one pod snapshot and return one result per evaluated entity.

    The pod's own result is always first, followed by init containers and
    then regular containers, each in declaration order.
    """
    if not namespace_in_scope(pod.namespace, config):
        return []

    pa = PodArgs(now=now, config=config, pod=pod)

    deleted = pod_deleted(pa)
    if deleted:
        return deleted

    results = [pod_unscheduled(pa)]
    if _any_problem(results):
        return results

    for container in pod.status.init_container_statuses:
        ca = ContainerArgs(now=now, config=config, pod=pod, container=container, init=True)
        results.append(_check_container(pa, ca, INIT_CONTAINER_CHECKS))
    if _any_problem(results):
        return results

    for container in pod.status.container_statuses:
        ca = ContainerArgs(now=now, config=config, pod=pod, container=container)
        results.append(_check_container(pa, ca, CONTAINER_CHECKS))

    return results


def evaluate_pod(event: PodEvent, config: CheckConfig, now: datetime) -> list[EntityResult]:
    """Decode *event* and evaluate it.

    Raises:
        MalformedStatusError: if the event's status payload cannot be decoded.
    """
    return check_pod_state(snapshot_from_event(event), config, now)
