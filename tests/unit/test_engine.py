"""Unit tests for podstate.engine and podstate.rules.pod_rules."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from podstate.config import build_check_config
from podstate.engine import check_pod_state, evaluate_pod
from podstate.errors import MalformedStatusError
from podstate.models.events import PodEvent
from podstate.models.pod import Outcome
from podstate.parser import snapshot_from_event

_NOW = datetime(2020, 3, 20, 15, 0, 0, tzinfo=UTC)


def _ts(delta: timedelta) -> str:
    return (_NOW - delta).strftime("%Y-%m-%dT%H:%M:%SZ")


def _make_container(
    name: str = "api",
    image: str = "registry.example.com/api:4.0",
    ready: bool = True,
    restart_count: int = 0,
    state: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "name": name,
        "image": image,
        "imageID": "",
        "ready": ready,
        "restartCount": restart_count,
        "state": state if state is not None else {"running": {"startedAt": _ts(timedelta(hours=1))}},
    }


def _make_event(
    phase: str = "Running",
    containers: list[dict[str, Any]] | None = None,
    init_containers: list[dict[str, Any]] | None = None,
    conditions: list[dict[str, Any]] | None = None,
    age: timedelta = timedelta(hours=1),
    namespace: str = "shop",
) -> PodEvent:
    status: dict[str, Any] = {
        "phase": phase,
        "startTime": _ts(age),
        "conditions": conditions or [],
        "containerStatuses": containers if containers is not None else [_make_container()],
    }
    if init_containers is not None:
        status["initContainerStatuses"] = init_containers
    return PodEvent.model_validate(
        {
            "name": "api-7d9f8",
            "namespace": namespace,
            "clusterName": "prod-eu",
            "timestamp": _ts(age),
            "statusJSON": json.dumps(status),
        }
    )


def _unschedulable() -> list[dict[str, Any]]:
    return [
        {
            "type": "PodScheduled",
            "status": "False",
            "reason": "Unschedulable",
            "message": "0/3 nodes are available: 3 Insufficient memory.",
        }
    ]


class TestHealthyPod:
    def test_pod_then_containers_in_order(self) -> None:
        event = _make_event(containers=[_make_container("api"), _make_container("sidecar", "envoy:1.14")])
        results = evaluate_pod(event, build_check_config(), _NOW)
        assert [r.id for r in results] == [
            "prod-eu:shop:api-7d9f8",
            "prod-eu:shop:api-7d9f8:api",
            "prod-eu:shop:api-7d9f8:sidecar",
        ]
        assert all(r.outcome == Outcome.HEALTHY for r in results)
        assert all(r.error is None for r in results)

    def test_evaluation_is_idempotent(self) -> None:
        event = _make_event(containers=[_make_container(restart_count=11)])
        config = build_check_config()
        assert evaluate_pod(event, config, _NOW) == evaluate_pod(event, config, _NOW)

    def test_ids_are_unique(self) -> None:
        event = _make_event(
            containers=[_make_container("api"), _make_container("setup")],
            init_containers=[_make_container("setup", state={"terminated": {"exitCode": 0, "reason": "Completed"}})],
        )
        results = evaluate_pod(event, build_check_config(), _NOW)
        ids = [r.id for r in results]
        assert len(ids) == len(set(ids)) == 4


class TestNamespaceScope:
    def test_excluded_namespace_yields_nothing(self) -> None:
        event = _make_event(namespace="kube-something", containers=[_make_container(restart_count=50)])
        assert evaluate_pod(event, build_check_config(namespace_exclude_regexp="^kube-"), _NOW) == []

    def test_included_namespace_is_evaluated(self) -> None:
        event = _make_event(namespace="kube-something")
        assert evaluate_pod(event, build_check_config(namespace_exclude_regexp=None), _NOW) != []


class TestDeletedPod:
    def test_pod_and_each_container_removed(self) -> None:
        event = _make_event(
            phase="Deleted",
            containers=[_make_container("api"), _make_container("sidecar", "envoy:1.14")],
            init_containers=[_make_container("migrate")],
        )
        results = evaluate_pod(event, build_check_config(), _NOW)
        assert len(results) == 3
        assert all(r.outcome == Outcome.REMOVED for r in results)
        assert all(r.error for r in results)
        assert results[0].error == "Pod shop/api-7d9f8 in Kubernetes cluster prod-eu was deleted"
        assert results[1].error == (
            "Container api (registry.example.com/api:4.0) of pod shop/api-7d9f8 in Kubernetes cluster prod-eu "
            "was deleted"
        )

    def test_deleted_pod_without_containers(self) -> None:
        results = evaluate_pod(_make_event(phase="Deleted", containers=[]), build_check_config(), _NOW)
        assert len(results) == 1
        assert results[0].outcome == Outcome.REMOVED

    def test_deletion_wins_over_container_problems(self) -> None:
        event = _make_event(
            phase="Deleted",
            containers=[_make_container(state={"waiting": {"reason": "CrashLoopBackOff", "message": "x"}})],
        )
        results = evaluate_pod(event, build_check_config(), _NOW)
        assert all(r.error is not None and r.error.endswith(" was deleted") for r in results)


class TestUnscheduledPod:
    def test_unschedulable_past_delay_yields_single_result(self) -> None:
        event = _make_event(phase="Pending", conditions=_unschedulable(), age=timedelta(minutes=20), containers=[])
        results = evaluate_pod(event, build_check_config(not_scheduled_delay_seconds=600), _NOW)
        assert len(results) == 1
        assert results[0].outcome == Outcome.PROBLEM
        assert results[0].error is not None
        assert "has not been scheduled" in results[0].error
        assert "0/3 nodes are available: 3 Insufficient memory." in results[0].error
        assert results[0].error.startswith("Pod shop/api-7d9f8")

    def test_unschedulable_short_circuits_containers(self) -> None:
        event = _make_event(
            phase="Pending",
            conditions=_unschedulable(),
            age=timedelta(minutes=20),
            containers=[_make_container(restart_count=99)],
        )
        assert len(evaluate_pod(event, build_check_config(), _NOW)) == 1

    def test_unschedulable_within_delay_is_healthy(self) -> None:
        event = _make_event(phase="Pending", conditions=_unschedulable(), age=timedelta(minutes=5), containers=[])
        results = evaluate_pod(event, build_check_config(not_scheduled_delay_seconds=600), _NOW)
        assert len(results) == 1
        assert results[0].error is None

    def test_zero_delay_disables(self) -> None:
        event = _make_event(phase="Pending", conditions=_unschedulable(), age=timedelta(days=3), containers=[])
        results = evaluate_pod(event, build_check_config(not_scheduled_delay_seconds=0), _NOW)
        assert results[0].error is None

    def test_scheduled_condition_is_ignored(self) -> None:
        conditions = [{"type": "PodScheduled", "status": "True"}]
        event = _make_event(conditions=conditions, age=timedelta(days=3))
        assert all(r.error is None for r in evaluate_pod(event, build_check_config(), _NOW))


class TestInitContainers:
    def test_failing_init_container_stops_evaluation(self) -> None:
        init = _make_container(
            "migrate",
            "migrate:1.2",
            ready=False,
            restart_count=13,
            state={"terminated": {"exitCode": 1, "reason": "Error"}},
        )
        event = _make_event(
            init_containers=[init],
            containers=[_make_container(state={"waiting": {"reason": "PodInitializing"}}, ready=False)],
        )
        results = evaluate_pod(event, build_check_config(max_restarts=10), _NOW)
        assert [r.id for r in results] == ["prod-eu:shop:api-7d9f8", "prod-eu:shop:api-7d9f8:init:migrate"]
        error = results[1].error
        assert error is not None
        assert "has restarted too many times" in error
        assert "13 > 10" in error
        assert error.startswith("Init container migrate (migrate:1.2)")

    def test_healthy_init_containers_precede_regular_containers(self) -> None:
        init = _make_container("migrate", state={"terminated": {"exitCode": 0, "reason": "Completed"}})
        event = _make_event(init_containers=[init])
        results = evaluate_pod(event, build_check_config(), _NOW)
        assert [r.id for r in results] == [
            "prod-eu:shop:api-7d9f8",
            "prod-eu:shop:api-7d9f8:init:migrate",
            "prod-eu:shop:api-7d9f8:api",
        ]

    def test_init_container_errors_below_threshold(self) -> None:
        init = _make_container("migrate", restart_count=2, state={"terminated": {"exitCode": 1, "reason": "Error"}})
        results = evaluate_pod(_make_event(init_containers=[init]), build_check_config(), _NOW)
        assert len(results) == 3
        assert all(r.error is None for r in results)


class TestRegularContainers:
    def test_image_pull_back_off(self) -> None:
        container = _make_container(
            ready=False,
            state={"waiting": {"reason": "ImagePullBackOff", "message": 'Back-off pulling image "api:4.0"'}},
        )
        results = evaluate_pod(_make_event(containers=[container]), build_check_config(), _NOW)
        error = results[1].error
        assert error is not None
        assert "is in ImagePullBackOff" in error
        assert 'Back-off pulling image "api:4.0"' in error

    def test_containers_are_independent(self) -> None:
        crashing = _make_container(
            "worker",
            state={"waiting": {"reason": "CrashLoopBackOff", "message": "back-off 5m0s"}},
            restart_count=4,
        )
        results = evaluate_pod(_make_event(containers=[crashing, _make_container("api")]), build_check_config(), _NOW)
        assert [r.outcome for r in results] == [Outcome.HEALTHY, Outcome.PROBLEM, Outcome.HEALTHY]

    def test_restart_boundary(self) -> None:
        config = build_check_config(max_restarts=10)
        at_max = evaluate_pod(_make_event(containers=[_make_container(restart_count=10)]), config, _NOW)
        below = evaluate_pod(_make_event(containers=[_make_container(restart_count=9)]), config, _NOW)
        assert at_max[1].is_problem
        assert not below[1].is_problem

    def test_not_ready_boundary(self) -> None:
        config = build_check_config(not_ready_delay_seconds=600)
        container = _make_container(ready=False)
        at_delay = evaluate_pod(_make_event(containers=[container], age=timedelta(seconds=600)), config, _NOW)
        past_delay = evaluate_pod(_make_event(containers=[container], age=timedelta(seconds=601)), config, _NOW)
        assert at_delay[1].error is None
        assert past_delay[1].error is not None
        assert past_delay[1].error.endswith("is not ready")

    def test_oom_killed(self) -> None:
        container = _make_container(ready=False, state={"terminated": {"exitCode": 137, "reason": "OOMKilled"}})
        results = evaluate_pod(_make_event(containers=[container]), build_check_config(), _NOW)
        assert results[1].error is not None
        assert results[1].error.endswith("has been OOMKilled: `137`")


class TestCheckPodState:
    def test_accepts_snapshot_directly(self) -> None:
        snapshot = snapshot_from_event(_make_event())
        assert len(check_pod_state(snapshot, build_check_config(), _NOW)) == 2

    def test_malformed_status_propagates(self) -> None:
        event = PodEvent.model_validate(
            {"name": "p", "namespace": "shop", "clusterName": "prod-eu", "statusJSON": "{not json"}
        )
        with pytest.raises(MalformedStatusError):
            evaluate_pod(event, build_check_config(), _NOW)
