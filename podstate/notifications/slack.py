"""Slack notification channel for podstate.

Sends Notification instances to a Slack webhook URL using Block Kit
message format with action-coded colours.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from podstate.notifications.manager import Notification, NotificationAction, NotificationChannel

_log = structlog.get_logger(component="notifications.slack")

# Slack sidebar colours per action
_ACTION_COLORS: dict[NotificationAction, str] = {
    NotificationAction.ALERT: "#e01e5a",
    NotificationAction.RECOVER: "#36a64f",
    NotificationAction.REMOVE: "#cccccc",
}

_ACTION_EMOJI: dict[NotificationAction, str] = {
    NotificationAction.ALERT: ":rotating_light:",
    NotificationAction.RECOVER: ":white_check_mark:",
    NotificationAction.REMOVE: ":wastebasket:",
}


class SlackNotificationChannel(NotificationChannel):
    """Delivers notifications to Slack via an incoming webhook.

    Args:
        webhook_url: Slack incoming webhook URL
                     (e.g. ``https://hooks.slack.com/services/...``).
        channels:    Chat channel names to post to. When empty the
                     webhook's own channel is used.
        timeout:     HTTP request timeout in seconds. Defaults to 10.
    """

    def __init__(self, webhook_url: str, channels: Sequence[str] = (), timeout: float = 10.0) -> None:
        if not webhook_url:
            raise ValueError("Slack webhook_url must not be empty")
        self._webhook_url = webhook_url
        self._channels = tuple(channels)
        self._timeout = timeout

    @property
    def channel_name(self) -> str:
        return "slack"

    async def send(self, notification: Notification) -> bool:
        """Post *notification* to every chat channel.

        Returns True only if every post got HTTP 200 OK.
        """
        import httpx

        targets: Sequence[str | None] = self._channels or (None,)
        delivered = True
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                for target in targets:
                    payload = self._build_payload(notification, target)
                    response = await client.post(self._webhook_url, json=payload)
                    if response.status_code != 200:
                        _log.warning(
                            "slack_unexpected_status",
                            status_code=response.status_code,
                            body=response.text[:200],
                            message_id=notification.message_id,
                            chat_channel=target,
                        )
                        delivered = False
        except httpx.TimeoutException:
            _log.warning("slack_request_timeout", message_id=notification.message_id)
            return False
        except httpx.HTTPError as exc:
            _log.warning("slack_http_error", error=str(exc), message_id=notification.message_id)
            return False
        return delivered

    def _build_payload(self, notification: Notification, chat_channel: str | None = None) -> dict[str, object]:
        """Construct a Slack Block Kit message payload."""
        color = _ACTION_COLORS.get(notification.action, "#cccccc")
        emoji = _ACTION_EMOJI.get(notification.action, ":bell:")
        action_label = notification.action.value.upper()

        payload: dict[str, object] = {
            "text": notification.text,
            "attachments": [
                {
                    "color": color,
                    "blocks": [
                        {
                            "type": "header",
                            "text": {
                                "type": "plain_text",
                                "text": f"{emoji} podstate {action_label}",
                                "emoji": True,
                            },
                        },
                        {
                            "type": "section",
                            "text": {
                                "type": "mrkdwn",
                                "text": notification.text,
                            },
                        },
                        {
                            "type": "context",
                            "elements": [
                                {
                                    "type": "mrkdwn",
                                    "text": f"Message ID: `{notification.message_id}`",
                                }
                            ],
                        },
                    ],
                }
            ],
        }
        if chat_channel:
            payload["channel"] = chat_channel
        return payload
