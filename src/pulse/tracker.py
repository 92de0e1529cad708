"""Edge-triggered up/down transition tracking."""

import logging

from pulse.models import HostStatus
from pulse.notifiers import Notifier

logger = logging.getLogger(__name__)


class StateTracker:
    """Remembers each host's last online flag and reports changes.

    Hosts are keyed by their network address. The first observation of a
    host only records its state, so a fresh process never alerts on startup.
    A tracker belongs to one poll loop and is not locked.
    """

    def __init__(self, notifier: Notifier | None = None) -> None:
        self.notifier = notifier
        self._previous: dict[str, bool] = {}

    def update(self, results: list[HostStatus]) -> list[str]:
        """Record a batch and return transition messages in batch order."""
        transitions: list[str] = []

        for status in results:
            key = status.config.host
            seen = key in self._previous
            was_online = self._previous.get(key)
            self._previous[key] = status.online

            if not seen or was_online == status.online:
                continue

            state = "up" if status.online else "down"
            verb = "came UP" if status.online else "went DOWN"
            message = f"{status.config.label} ({status.config.host}) {verb}"
            logger.info(message)
            transitions.append(message)

            if self.notifier is not None:
                self.notifier.notify(status.config, state)

        return transitions

    def last_state(self, host: str) -> bool | None:
        """Last observed flag for a host address, or None if never seen."""
        return self._previous.get(host)
