"""Stable identifiers and descriptions for pods and containers.

Ids are the deduplication keys downstream notifications are tracked by;
slugs are embedded in every generated message.
"""

from __future__ import annotations

from podstate.models.pod import PodSnapshot
from podstate.models.status import ContainerStatus


def pod_id(pod: PodSnapshot) -> str:
    """Return ``cluster:namespace:name``."""
    return ":".join((pod.cluster, pod.namespace, pod.name))


def container_id(pod: PodSnapshot, container: ContainerStatus, init: bool = False) -> str:
    """Return ``cluster:namespace:pod[:init]:container``."""
    parts = [pod_id(pod)]
    if init:
        parts.append("init")
    parts.append(container.name)
    return ":".join(parts)


def pod_slug(pod: PodSnapshot) -> str:
    return f"pod {pod.namespace}/{pod.name} in Kubernetes cluster {pod.cluster}"


def container_slug(pod: PodSnapshot, container: ContainerStatus, init: bool = False) -> str:
    prefix = "init " if init else ""
    return f"{prefix}container {container.name} ({container.image}) of {pod_slug(pod)}"


def uc_first(text: str) -> str:
    """Uppercase the first character of *text*."""
    if not text:
        return text
    return text[:1].upper() + text[1:]
