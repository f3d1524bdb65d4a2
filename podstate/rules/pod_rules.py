"""Pod-level checks: deletion and scheduling."""

from __future__ import annotations

from podstate.models.pod import EntityResult
from podstate.naming import container_id, container_slug, pod_id, pod_slug, uc_first
from podstate.rules.base import PodArgs, seconds_since


def pod_deleted(pa: PodArgs) -> list[EntityResult]:
    """Return removal results for a deleted pod and its containers.

    Returns an empty list unless the pod phase is ``Deleted``. Init
    containers are not included.
    """
    if pa.status.phase != "Deleted":
        return []
    slug = pod_slug(pa.pod)
    results = [EntityResult.removed(pod_id(pa.pod), slug, uc_first(f"{slug} was deleted"))]
    for container in pa.status.container_statuses:
        c_slug = container_slug(pa.pod, container)
        results.append(
            EntityResult.removed(
                container_id(pa.pod, container),
                c_slug,
                uc_first(f"{c_slug} was deleted"),
            )
        )
    return results


def pod_unscheduled(pa: PodArgs) -> EntityResult:
    """Return the pod result, a problem if it has been unschedulable too long."""
    p_id = pod_id(pa.pod)
    slug = pod_slug(pa.pod)
    healthy = EntityResult.healthy(p_id, slug)
    if pa.config.not_scheduled_delay_seconds < 1:
        return healthy
    if pa.pod.created_at is None:
        return healthy
    unscheduled = pa.status.find_condition("PodScheduled", reason="Unschedulable")
    if unscheduled is None:
        return healthy
    if seconds_since(pa.now, pa.pod.created_at) > pa.config.not_scheduled_delay_seconds:
        return EntityResult.problem(
            p_id,
            slug,
            uc_first(f"{slug} has not been scheduled: `{unscheduled.message or ''}`"),
        )
    return healthy
