"""Prometheus metrics for podstate."""

from __future__ import annotations

from prometheus_client import Counter

# Evaluation metrics
pods_evaluated_total = Counter(
    "podstate_pods_evaluated_total",
    "Total pod snapshots received by the handler",
    ["result"],
)

entity_results_total = Counter(
    "podstate_entity_results_total",
    "Total pod and container results produced by evaluation",
    ["outcome"],
)

status_parse_failures_total = Counter(
    "podstate_status_parse_failures_total",
    "Total pod status payloads that could not be decoded",
)

# Notification metrics
notifications_total = Counter(
    "podstate_notifications_total",
    "Total notification delivery attempts",
    ["channel", "success"],
)
