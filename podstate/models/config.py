"""Resolved, immutable configuration values.

Instances are produced by the builders in :mod:`podstate.config`; all
defaults are applied and all scope patterns are compiled by the time a
``CheckConfig`` exists.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CheckConfig:
    """Thresholds, toggles and scope patterns consumed by the rule engine.

    A numeric threshold of 0 disables the corresponding check.
    """

    crash_loop_back_off: bool = True
    image_pull_back_off: bool = True
    oom_killed: bool = True
    create_container_config_error: bool = True
    max_restarts: int = 10
    not_ready_delay_seconds: int = 600
    not_scheduled_delay_seconds: int = 600
    not_created_seconds: int = 600
    init_container_failure_count: int = 3
    restarts_per_day: float = 0.0
    namespace_include: re.Pattern[str] | None = None
    namespace_exclude: re.Pattern[str] | None = None
    cluster_include: re.Pattern[str] | None = None
    cluster_exclude: re.Pattern[str] | None = None


@dataclass(frozen=True)
class PodStateConfig:
    """Top-level application configuration loaded from the environment."""

    name: str = "podstate"
    channels: tuple[str, ...] = field(default_factory=tuple)
    slack_webhook_url: str = ""
    message_ttl_minutes: int = 1440
    log_level: str = "info"
    check: CheckConfig = field(default_factory=CheckConfig)

    @property
    def message_ttl_seconds(self) -> int:
        return self.message_ttl_minutes * 60
