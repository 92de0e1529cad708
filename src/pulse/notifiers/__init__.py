"""Transition notification handlers."""

import logging
import threading

from pulse.config import HostConfig, NotifyConfig
from pulse.notifiers.base import BaseNotifier
from pulse.notifiers.command import CommandNotifier, render_command
from pulse.notifiers.webhook import WebhookNotifier

logger = logging.getLogger(__name__)


class Notifier:
    """Fan a transition out to every configured channel.

    Delivery is at most once: each transition runs on its own daemon thread,
    is never retried, and channel failures are dropped.
    """

    def __init__(self, channels: list[BaseNotifier] | None = None) -> None:
        self.channels = channels or []

    @classmethod
    def from_config(cls, config: NotifyConfig) -> "Notifier":
        channels: list[BaseNotifier] = []
        if config.webhook:
            channels.append(WebhookNotifier(config.webhook))
        if config.command:
            channels.append(CommandNotifier(config.command))
        return cls(channels)

    @property
    def enabled(self) -> bool:
        return bool(self.channels)

    def notify(self, host: HostConfig, state: str) -> threading.Thread | None:
        """Dispatch without blocking the caller. Returns the worker thread, if any."""
        if not self.channels:
            return None

        thread = threading.Thread(
            target=self.deliver,
            args=(host, state),
            name=f"pulse-notify-{host.host}",
            daemon=True,
        )
        thread.start()
        return thread

    def deliver(self, host: HostConfig, state: str) -> None:
        """Deliver on every channel in order, synchronously."""
        for channel in self.channels:
            try:
                channel.send(host, state)
            except Exception as e:
                logger.warning(f"{type(channel).__name__} failed: {e}")


__all__ = ["BaseNotifier", "CommandNotifier", "Notifier", "WebhookNotifier", "render_command"]
