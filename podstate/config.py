"""Configuration resolution.

Three entry points, all pure apart from reading the environment:

* :func:`build_check_config` turns keyword overrides into a frozen
  :class:`CheckConfig`, applying defaults and compiling scope patterns.
* :func:`check_config_from_parameters` resolves user-facing parameters
  (``maxRestarts`` as a string, ``notReadyDelay`` in minutes).
* :func:`load_config` reads ``PODSTATE_*`` environment variables into a
  :class:`PodStateConfig`.

Invalid values raise :class:`~podstate.errors.ConfigurationError`.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from typing import Any

from podstate.errors import ConfigurationError
from podstate.models.config import CheckConfig, PodStateConfig

_ENV_PREFIX = "PODSTATE_"

DEFAULT_NAMESPACE_EXCLUDE = "^kube-"

_VALID_LOG_LEVELS: frozenset[str] = frozenset({"debug", "info", "warning", "error"})
_TRUTHY: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSY: frozenset[str] = frozenset({"0", "false", "no", "off"})

_DEFAULT_MAX_RESTARTS = 10
_DEFAULT_NOT_READY_DELAY_MINUTES = 10

# Message TTL bounds in minutes: one minute to one week.
_TTL_MIN = 1
_TTL_MAX = 10080


def _compile(name: str, pattern: str | None) -> re.Pattern[str] | None:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid regular expression for {name}: {pattern!r}: {exc}") from exc


def build_check_config(
    *,
    crash_loop_back_off: bool = True,
    image_pull_back_off: bool = True,
    oom_killed: bool = True,
    create_container_config_error: bool = True,
    max_restarts: int = _DEFAULT_MAX_RESTARTS,
    not_ready_delay_seconds: int = _DEFAULT_NOT_READY_DELAY_MINUTES * 60,
    not_scheduled_delay_seconds: int = 600,
    not_created_seconds: int = 600,
    init_container_failure_count: int = 3,
    restarts_per_day: float = 0.0,
    namespace_include_regexp: str | None = None,
    namespace_exclude_regexp: str | None = DEFAULT_NAMESPACE_EXCLUDE,
    cluster_include_regexp: str | None = None,
    cluster_exclude_regexp: str | None = None,
) -> CheckConfig:
    """Return a fully resolved CheckConfig.

    Negative thresholds are clamped to 0 (disabled). Empty or None
    patterns impose no constraint.
    """
    return CheckConfig(
        crash_loop_back_off=crash_loop_back_off,
        image_pull_back_off=image_pull_back_off,
        oom_killed=oom_killed,
        create_container_config_error=create_container_config_error,
        max_restarts=max(0, max_restarts),
        not_ready_delay_seconds=max(0, not_ready_delay_seconds),
        not_scheduled_delay_seconds=max(0, not_scheduled_delay_seconds),
        not_created_seconds=max(0, not_created_seconds),
        init_container_failure_count=max(0, init_container_failure_count),
        restarts_per_day=max(0.0, restarts_per_day),
        namespace_include=_compile("namespaceIncludeRegExp", namespace_include_regexp),
        namespace_exclude=_compile("namespaceExcludeRegExp", namespace_exclude_regexp),
        cluster_include=_compile("clusterIncludeRegExp", cluster_include_regexp),
        cluster_exclude=_compile("clusterExcludeRegExp", cluster_exclude_regexp),
    )


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip(), 10)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}") from exc


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


# camelCase parameter name -> build_check_config keyword
_BOOL_PARAMETERS: dict[str, str] = {
    "crashLoopBackOff": "crash_loop_back_off",
    "imagePullBackOff": "image_pull_back_off",
    "oomKilled": "oom_killed",
    "createContainerConfigError": "create_container_config_error",
}

_INT_PARAMETERS: dict[str, str] = {
    "notScheduledDelaySeconds": "not_scheduled_delay_seconds",
    "notCreatedSeconds": "not_created_seconds",
    "initContainerFailureCount": "init_container_failure_count",
}

_PATTERN_PARAMETERS: dict[str, str] = {
    "namespaceIncludeRegExp": "namespace_include_regexp",
    "namespaceExcludeRegExp": "namespace_exclude_regexp",
    "clusterIncludeRegExp": "cluster_include_regexp",
    "clusterExcludeRegExp": "cluster_exclude_regexp",
}


def check_config_from_parameters(params: Mapping[str, Any]) -> CheckConfig:
    """Resolve user-facing parameters into a CheckConfig.

    ``maxRestarts`` is a base-10 integer string, ``"0"`` disables the
    check. ``notReadyDelay`` is a number of minutes as a string. Other
    recognised keys use the camelCase names of the CheckConfig fields.
    Absent or empty values take their defaults. *params* is not modified.
    """
    overrides: dict[str, Any] = {}

    max_restarts = params.get("maxRestarts")
    if max_restarts not in (None, ""):
        overrides["max_restarts"] = _parse_int("maxRestarts", max_restarts)

    not_ready_delay = params.get("notReadyDelay")
    if not_ready_delay not in (None, ""):
        overrides["not_ready_delay_seconds"] = _parse_int("notReadyDelay", not_ready_delay) * 60

    for key, kwarg in _BOOL_PARAMETERS.items():
        if params.get(key) not in (None, ""):
            overrides[kwarg] = _parse_bool(key, params[key])

    for key, kwarg in _INT_PARAMETERS.items():
        if params.get(key) not in (None, ""):
            overrides[kwarg] = _parse_int(key, params[key])

    if params.get("restartsPerDay") not in (None, ""):
        try:
            overrides["restarts_per_day"] = float(params["restartsPerDay"])
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid number for restartsPerDay: {params['restartsPerDay']!r}") from exc

    for key, kwarg in _PATTERN_PARAMETERS.items():
        if key in params:
            overrides[kwarg] = params[key]

    return build_check_config(**overrides)


def chat_channel_names(channels: Sequence[Mapping[str, Any] | str] | None) -> tuple[str, ...]:
    """Return channel names from channel names or channel records.

    Channel records carry the name under ``channelName``.

    Raises:
        ConfigurationError: if no channel names are provided.
    """
    names: list[str] = []
    for channel in channels or ():
        name = channel if isinstance(channel, str) else channel.get("channelName")
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    if not names:
        raise ConfigurationError(f"Missing required configuration parameter: channels: {channels!r}")
    return tuple(names)


# ---------------------------------------------------------------------------
# Environment loading
# ---------------------------------------------------------------------------


def _env(name: str, default: str = "") -> str:
    return os.environ.get(_ENV_PREFIX + name, default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    return _parse_bool(_ENV_PREFIX + name, raw)


def _env_int(name: str, default: int, minimum: int = 0, maximum: int | None = None) -> int:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    value = _parse_int(_ENV_PREFIX + name, raw)
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return max(0.0, float(raw))
    except ValueError as exc:
        raise ConfigurationError(f"Invalid number for {_ENV_PREFIX}{name}: {raw!r}") from exc


def _env_log_level() -> str:
    level = _env("LOG_LEVEL", "info").strip().lower()
    if level not in _VALID_LOG_LEVELS:
        raise ConfigurationError(f"Invalid log level: {level!r}. Expected one of {sorted(_VALID_LOG_LEVELS)}")
    return level


def _env_channels() -> tuple[str, ...]:
    raw = os.environ.get(_ENV_PREFIX + "CHANNELS")
    if raw is None:
        return ()
    return chat_channel_names(raw.split(","))


def load_config() -> PodStateConfig:
    """Load the application configuration from ``PODSTATE_*`` variables.

    ``PODSTATE_NAMESPACE_EXCLUDE_REGEXP`` defaults to ``^kube-``; set it to
    an empty string to evaluate every namespace.
    """
    check = build_check_config(
        crash_loop_back_off=_env_bool("CRASH_LOOP_BACK_OFF", True),
        image_pull_back_off=_env_bool("IMAGE_PULL_BACK_OFF", True),
        oom_killed=_env_bool("OOM_KILLED", True),
        create_container_config_error=_env_bool("CREATE_CONTAINER_CONFIG_ERROR", True),
        max_restarts=_env_int("MAX_RESTARTS", _DEFAULT_MAX_RESTARTS),
        not_ready_delay_seconds=_env_int("NOT_READY_DELAY_SECONDS", _DEFAULT_NOT_READY_DELAY_MINUTES * 60),
        not_scheduled_delay_seconds=_env_int("NOT_SCHEDULED_DELAY_SECONDS", 600),
        not_created_seconds=_env_int("NOT_CREATED_SECONDS", 600),
        init_container_failure_count=_env_int("INIT_CONTAINER_FAILURE_COUNT", 3),
        restarts_per_day=_env_float("RESTARTS_PER_DAY", 0.0),
        namespace_include_regexp=_env("NAMESPACE_INCLUDE_REGEXP") or None,
        namespace_exclude_regexp=_env("NAMESPACE_EXCLUDE_REGEXP", DEFAULT_NAMESPACE_EXCLUDE) or None,
        cluster_include_regexp=_env("CLUSTER_INCLUDE_REGEXP") or None,
        cluster_exclude_regexp=_env("CLUSTER_EXCLUDE_REGEXP") or None,
    )
    return PodStateConfig(
        name=_env("NAME", "podstate").strip() or "podstate",
        channels=_env_channels(),
        slack_webhook_url=_env("SLACK_WEBHOOK_URL").strip(),
        message_ttl_minutes=_env_int("MESSAGE_TTL_MINUTES", 1440, minimum=_TTL_MIN, maximum=_TTL_MAX),
        log_level=_env_log_level(),
        check=check,
    )
