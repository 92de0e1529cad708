"""Base notifier interface."""

from abc import ABC, abstractmethod

from pulse.config import HostConfig


class BaseNotifier(ABC):
    """Abstract base class for transition notifiers."""

    @abstractmethod
    def send(self, host: HostConfig, state: str) -> bool:
        """Deliver one transition.

        Args:
            host: The host that changed state.
            state: "up" or "down".

        Returns:
            True if the delivery attempt succeeded. Failures must not raise.
        """
        ...
