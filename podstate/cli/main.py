"""podstate command-line interface.

Commands:
    podstate check FILE [--now ISO] [--json]   Evaluate pod events and print results.
    podstate notify FILE [--now ISO]           Evaluate pod events and post notifications.
    podstate version                           Print version and exit.

FILE holds a JSON list of pod events, or an object whose ``K8Pod`` key
holds that list. Configuration is read from ``PODSTATE_*`` environment
variables.
"""

from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime
from typing import Any

import click
from pydantic import ValidationError

from podstate import __version__
from podstate.config import chat_channel_names, load_config
from podstate.engine import evaluate_pod
from podstate.errors import ConfigurationError, MalformedStatusError
from podstate.handler import PodStateHandler
from podstate.models.config import PodStateConfig
from podstate.models.events import PodEvent
from podstate.models.pod import Outcome
from podstate.notifications import build_notification_dispatcher
from podstate.observability.logging import setup_logging
from podstate.scope import cluster_in_scope

# ---------------------------------------------------------------------------
# Colour helpers
# ---------------------------------------------------------------------------

_OUTCOME_COLORS: dict[Outcome, str] = {
    Outcome.HEALTHY: "green",
    Outcome.PROBLEM: "red",
    Outcome.REMOVED: "yellow",
}


def _styled_outcome(outcome: Outcome) -> str:
    color = _OUTCOME_COLORS.get(outcome, "white")
    return click.style(outcome.value.upper(), fg=color, bold=True)


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------


def _load_config() -> PodStateConfig:
    try:
        config = load_config()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(config)
    return config


def _read_events(path: str) -> list[PodEvent]:
    """Read pod events from *path*.

    Raises click.ClickException if the file is not valid JSON or an event
    is missing required fields.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            data: Any = json.load(fh)
    except (OSError, ValueError) as exc:
        raise click.ClickException(f"Cannot read pod events from {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("K8Pod", [])
    if not isinstance(data, list):
        raise click.ClickException(f"Expected a list of pod events in {path}")

    try:
        return [PodEvent.model_validate(item) for item in data]
    except ValidationError as exc:
        raise click.ClickException(f"Invalid pod event in {path}: {exc}") from exc


def _parse_now(value: str | None) -> datetime:
    if value is None:
        return datetime.now(tz=UTC)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"not an ISO-8601 timestamp: {value!r}", param_hint="--now") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
def cli() -> None:
    """podstate: Kubernetes pod and container state alerts."""


# ---------------------------------------------------------------------------
# podstate version
# ---------------------------------------------------------------------------


@cli.command("version")
def cmd_version() -> None:
    """Print the podstate version and exit."""
    click.echo(f"podstate {__version__}")


# ---------------------------------------------------------------------------
# podstate check
# ---------------------------------------------------------------------------


@cli.command("check")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--now", "now_value", default=None, help="Evaluation time (ISO-8601). Defaults to the current time.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print results as JSON.")
def cmd_check(file: str, now_value: str | None, as_json: bool) -> None:
    """Evaluate the pod events in FILE and print one line per pod and container.

    Exits with status 1 if any pod status could not be parsed.
    """
    config = _load_config()
    now = _parse_now(now_value)
    events = _read_events(file)

    rows: list[dict[str, object]] = []
    failures = 0
    for event in events:
        if not cluster_in_scope(event.cluster_name, config.check):
            continue
        try:
            results = evaluate_pod(event, config.check, now)
        except MalformedStatusError as exc:
            failures += 1
            click.echo(
                click.style(f"Failed to parse status of pod {event.namespace}/{event.name}: {exc}", fg="red"),
                err=True,
            )
            continue
        for result in results:
            rows.append(
                {
                    "id": result.id,
                    "slug": result.slug,
                    "outcome": result.outcome.value,
                    "message": result.message,
                }
            )
            if not as_json:
                line = f"{_styled_outcome(result.outcome)}  {result.id}"
                if result.error:
                    line += f"  {result.error}"
                click.echo(line)

    if as_json:
        click.echo(json.dumps(rows, indent=2))
    elif not rows:
        click.echo(click.style("No pods evaluated.", fg="yellow"))

    if failures:
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# podstate notify
# ---------------------------------------------------------------------------


@cli.command("notify")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--now", "now_value", default=None, help="Evaluation time (ISO-8601). Defaults to the current time.")
def cmd_notify(file: str, now_value: str | None) -> None:
    """Evaluate the pod events in FILE and post notifications to Slack.

    Exits with 1 when any pod could not be parsed or any message could not
    be sent.
    """
    config = _load_config()
    if not config.slack_webhook_url:
        raise click.ClickException("Missing required configuration parameter: PODSTATE_SLACK_WEBHOOK_URL")
    try:
        chat_channel_names(config.channels)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    now = _parse_now(now_value)
    events = _read_events(file)

    handler = PodStateHandler(config, build_notification_dispatcher(config))
    status = asyncio.run(handler.handle(events, now))

    color = "green" if status.code == 0 else "red"
    click.echo(click.style(status.reason, fg=color))
    if status.code:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
