"""Notification mapping, delivery bookkeeping and fan-out.

An :class:`~podstate.models.pod.EntityResult` becomes a :class:`Notification`
keyed by a per-day message id. Problems post a new alert; recoveries and
removals only update an alert that is still live. The
:class:`MessageLedger` tracks which alerts are live and suppresses
re-posting an identical alert text until the message expires.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum

import structlog

from podstate.models.pod import EntityResult, Outcome
from podstate.naming import uc_first
from podstate.observability.metrics import notifications_total

_log = structlog.get_logger(component="notifications.manager")


class NotificationAction(StrEnum):
    ALERT = "alert"
    RECOVER = "recover"
    REMOVE = "remove"


@dataclass(frozen=True)
class Notification:
    """A chat message derived from one entity result.

    Attributes:
        message_id:  ``{config_name}:{entity_id}:{YYYYMMDD}`` in UTC.
        entity_id:   Identifier of the pod or container.
        text:        Message body.
        action:      ALERT posts a message; RECOVER and REMOVE only update
                     a previously posted one.
        ttl_seconds: Lifetime of the posted message.
    """

    message_id: str
    entity_id: str
    text: str
    action: NotificationAction
    ttl_seconds: int

    @property
    def update_only(self) -> bool:
        return self.action != NotificationAction.ALERT


def message_id(config_name: str, entity_id: str, now: datetime) -> str:
    day = now.astimezone(UTC).strftime("%Y%m%d")
    return f"{config_name}:{entity_id}:{day}"


def build_notification(
    result: EntityResult,
    config_name: str,
    now: datetime,
    ttl_seconds: int,
) -> Notification:
    """Map an entity result to the notification that reports it."""
    if result.outcome == Outcome.PROBLEM:
        action = NotificationAction.ALERT
        text = result.message or ""
    elif result.outcome == Outcome.REMOVED:
        action = NotificationAction.REMOVE
        text = result.message or uc_first(f"{result.slug} was deleted")
    else:
        action = NotificationAction.RECOVER
        text = uc_first(f"{result.slug} recovered")
    return Notification(
        message_id=message_id(config_name, result.id, now),
        entity_id=result.id,
        text=text,
        action=action,
        ttl_seconds=ttl_seconds,
    )


@dataclass
class _LedgerEntry:
    text: str
    expires_at: datetime


class MessageLedger:
    """Tracks posted alerts by message id.

    * An ALERT is sent unless the same text was already posted under the
      same id and has not expired.
    * RECOVER and REMOVE are sent only while an alert for the id is live;
      the id is forgotten afterwards so a recovery is reported once.

    Expired entries are dropped once the earliest expiry has passed.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _LedgerEntry] = {}
        self._next_expiry: datetime | None = None

    def _sweep(self, now: datetime) -> None:
        if self._next_expiry is None or now < self._next_expiry:
            return
        self._entries = {mid: entry for mid, entry in self._entries.items() if entry.expires_at > now}
        self._next_expiry = min((entry.expires_at for entry in self._entries.values()), default=None)

    def should_send(self, notification: Notification, now: datetime | None = None) -> bool:
        """Return True if *notification* should be delivered, and record it."""
        now = now or datetime.now(tz=UTC)
        self._sweep(now)
        entry = self._entries.get(notification.message_id)

        if notification.update_only:
            if entry is None:
                return False
            del self._entries[notification.message_id]
            return True

        if entry is not None and entry.text == notification.text:
            return False
        expires_at = now + timedelta(seconds=notification.ttl_seconds)
        self._entries[notification.message_id] = _LedgerEntry(text=notification.text, expires_at=expires_at)
        if self._next_expiry is None or expires_at < self._next_expiry:
            self._next_expiry = expires_at
        return True

    def forget(self, message_id: str) -> None:
        """Drop any record of *message_id*. Unknown ids are ignored."""
        self._entries.pop(message_id, None)

    def __len__(self) -> int:
        return len(self._entries)


class NotificationChannel(ABC):
    """A destination notifications can be delivered to."""

    @property
    @abstractmethod
    def channel_name(self) -> str: ...

    @abstractmethod
    async def send(self, notification: Notification) -> bool:
        """Deliver *notification*. Returns True on success."""


class NotificationDispatcher:
    """Fans notifications out to every configured channel.

    Channel failures and exceptions are logged and counted, never raised.
    """

    def __init__(self, channels: Sequence[NotificationChannel], ledger: MessageLedger | None = None) -> None:
        self._channels = list(channels)
        self._ledger = ledger if ledger is not None else MessageLedger()

    async def dispatch(self, notification: Notification, now: datetime | None = None) -> list[str]:
        """Deliver *notification* to all channels.

        Returns the names of the channels that failed. Suppressed
        notifications are not delivered and report no failures.
        """
        if not self._ledger.should_send(notification, now):
            _log.debug(
                "notification_suppressed",
                message_id=notification.message_id,
                action=notification.action.value,
            )
            return []

        if not self._channels:
            return []

        outcomes = await asyncio.gather(
            *(self._send_one(channel, notification) for channel in self._channels),
        )
        failed = [channel.channel_name for channel, ok in zip(self._channels, outcomes, strict=True) if not ok]

        if failed and notification.action == NotificationAction.ALERT:
            # Let the next evaluation retry the alert.
            self._ledger.forget(notification.message_id)
        return failed

    async def _send_one(self, channel: NotificationChannel, notification: Notification) -> bool:
        try:
            ok = await channel.send(notification)
        except Exception as exc:
            _log.error(
                "notification_channel_error",
                channel=channel.channel_name,
                message_id=notification.message_id,
                error=str(exc),
            )
            ok = False
        notifications_total.labels(channel=channel.channel_name, success="true" if ok else "false").inc()
        if ok:
            _log.info(
                "notification_sent",
                channel=channel.channel_name,
                message_id=notification.message_id,
                action=notification.action.value,
            )
        return ok
