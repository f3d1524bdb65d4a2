"""Pydantic model of an incoming pod state event.

Events arrive with camelCase keys (``clusterName``, ``statusJSON``); older
producers send the cluster name as ``environment``.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PodEvent(BaseModel):
    """One pod as delivered by the event source."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str = Field(..., min_length=1, description="Pod name.")
    namespace: str = Field(..., description="Pod namespace.")
    cluster_name: str = Field(
        ...,
        validation_alias=AliasChoices("clusterName", "cluster_name", "environment"),
        description="Name of the Kubernetes cluster the pod runs in.",
    )
    timestamp: str | None = Field(
        default=None,
        description="Pod creation time as an ISO-8601 UTC string.",
    )
    status_json: str | None = Field(
        default=None,
        validation_alias=AliasChoices("statusJSON", "status_json"),
        description="Raw JSON-encoded pod status object.",
    )
    phase: str | None = None
    base_name: str | None = Field(default=None, validation_alias=AliasChoices("baseName", "base_name"))
    resource_version: int | str | None = Field(
        default=None,
        validation_alias=AliasChoices("resourceVersion", "resource_version"),
    )
