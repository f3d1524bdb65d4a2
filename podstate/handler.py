"""Batch pod event handler.

Runs each pod event through the cluster gate, the status parser and the
rule engine, turns every entity result into a notification, and reduces
the whole batch to a single :class:`HandlerStatus`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from podstate.engine import evaluate_pod
from podstate.errors import MalformedStatusError
from podstate.models.config import PodStateConfig
from podstate.models.events import PodEvent
from podstate.models.pod import PodSnapshot
from podstate.models.status import PodStatus
from podstate.naming import pod_slug
from podstate.notifications.manager import NotificationDispatcher, build_notification
from podstate.observability.logging import get_logger
from podstate.observability.metrics import (
    entity_results_total,
    pods_evaluated_total,
    status_parse_failures_total,
)
from podstate.scope import cluster_in_scope

_log = get_logger("handler")

ALL_HEALTHY = "All pods healthy"


class AuditLog(Protocol):
    """Destination for human-readable audit lines."""

    async def log(self, message: str) -> None: ...


class ClusterRegistry(Protocol):
    """Source of the cluster names the integration is registered for."""

    async def cluster_names(self) -> set[str]: ...


class LoggingAuditLog:
    """AuditLog that writes each line as a structlog event."""

    def __init__(self) -> None:
        self._log = get_logger("audit")

    async def log(self, message: str) -> None:
        self._log.info("audit", message=message)


@dataclass(frozen=True)
class HandlerStatus:
    """Outcome of one handler invocation.

    ``code`` counts the pods that could not be parsed and the messages that
    could not be sent. Entity errors alone leave it at 0.
    """

    code: int
    reason: str


class PodStateHandler:
    """Evaluates batches of pod events and dispatches notifications.

    Args:
        config:           Application configuration.
        dispatcher:       Delivers notifications to chat channels.
        audit:            Receives parse failures, send failures and entity
                          errors. Defaults to :class:`LoggingAuditLog`.
        cluster_registry: When given, pods from clusters it does not list
                          are skipped.
    """

    def __init__(
        self,
        config: PodStateConfig,
        dispatcher: NotificationDispatcher,
        audit: AuditLog | None = None,
        cluster_registry: ClusterRegistry | None = None,
    ) -> None:
        self._config = config
        self._dispatcher = dispatcher
        self._audit: AuditLog = audit if audit is not None else LoggingAuditLog()
        self._cluster_registry = cluster_registry

    async def handle(self, events: Sequence[PodEvent], now: datetime | None = None) -> HandlerStatus:
        now = now or datetime.now(tz=UTC)
        check = self._config.check
        known_clusters = await self._cluster_registry.cluster_names() if self._cluster_registry else None

        reasons: list[tuple[int, str]] = []

        for event in events:
            if not cluster_in_scope(event.cluster_name, check):
                pods_evaluated_total.labels(result="cluster_excluded").inc()
                continue
            if known_clusters is not None and event.cluster_name not in known_clusters:
                _log.debug("pod_cluster_not_registered", cluster=event.cluster_name, pod=event.name)
                pods_evaluated_total.labels(result="cluster_unknown").inc()
                continue

            try:
                results = evaluate_pod(event, check, now)
            except MalformedStatusError as exc:
                slug = pod_slug(PodSnapshot(event.cluster_name, event.namespace, event.name, PodStatus()))
                message = f"Failed to parse status of {slug}: {exc}"
                _log.warning(
                    "pod_status_parse_failed",
                    cluster=event.cluster_name,
                    namespace=event.namespace,
                    pod=event.name,
                    error=str(exc),
                )
                status_parse_failures_total.inc()
                pods_evaluated_total.labels(result="malformed").inc()
                await self._audit.log(message)
                reasons.append((1, message))
                continue

            pods_evaluated_total.labels(result="evaluated" if results else "namespace_excluded").inc()

            for result in results:
                entity_results_total.labels(outcome=result.outcome.value).inc()
                notification = build_notification(result, self._config.name, now, self._config.message_ttl_seconds)
                failed = await self._dispatcher.dispatch(notification, now)
                if failed:
                    message = (
                        f"Failed to send message {notification.message_id}: delivery failed on {', '.join(failed)}"
                    )
                    await self._audit.log(message)
                    reasons.append((1, message))
                if result.error:
                    await self._audit.log(result.error)
                    reasons.append((0, result.error))

        if not reasons:
            return HandlerStatus(code=0, reason=ALL_HEALTHY)
        status = HandlerStatus(
            code=sum(code for code, _ in reasons),
            reason="; ".join(reason for _, reason in reasons),
        )
        _log.info("pod_batch_handled", pods=len(events), code=status.code, reasons=len(reasons))
        return status
