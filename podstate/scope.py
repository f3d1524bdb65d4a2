"""Namespace and cluster scope filtering.

Patterns are compiled when configuration is resolved; these functions only
apply them. Matching uses search semantics, so ``^kube-`` must be anchored
explicitly to match a prefix.
"""

from __future__ import annotations

import re

from podstate.models.config import CheckConfig


def _in_scope(value: str, include: re.Pattern[str] | None, exclude: re.Pattern[str] | None) -> bool:
    if exclude is not None and exclude.search(value):
        return False
    if include is not None and not include.search(value):
        return False
    return True


def namespace_in_scope(namespace: str, config: CheckConfig) -> bool:
    """Return True if pods in *namespace* should be evaluated."""
    return _in_scope(namespace, config.namespace_include, config.namespace_exclude)


def cluster_in_scope(cluster: str, config: CheckConfig) -> bool:
    """Return True if pods in *cluster* should be evaluated."""
    return _in_scope(cluster, config.cluster_include, config.cluster_exclude)
