"""Notification channels and the dispatcher factory."""

from __future__ import annotations

import structlog

from podstate.models.config import PodStateConfig
from podstate.notifications.manager import (
    MessageLedger,
    Notification,
    NotificationAction,
    NotificationChannel,
    NotificationDispatcher,
    build_notification,
)
from podstate.notifications.slack import SlackNotificationChannel

__all__ = [
    "MessageLedger",
    "Notification",
    "NotificationAction",
    "NotificationChannel",
    "NotificationDispatcher",
    "SlackNotificationChannel",
    "build_notification",
    "build_notification_dispatcher",
]

_log = structlog.get_logger(component="notifications")


def build_notification_dispatcher(config: PodStateConfig) -> NotificationDispatcher:
    """Build a dispatcher with every channel *config* enables.

    A Slack channel is added when a webhook URL is configured.
    """
    channels: list[NotificationChannel] = []
    if config.slack_webhook_url:
        channels.append(SlackNotificationChannel(config.slack_webhook_url, channels=config.channels))

    _log.info("notification_channels_configured", channels=[c.channel_name for c in channels])
    return NotificationDispatcher(channels, MessageLedger())
