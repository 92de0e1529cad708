"""Generic webhook notification handler."""

import logging

import httpx

from pulse.config import HostConfig
from pulse.models import now, rfc3339
from pulse.notifiers.base import BaseNotifier

logger = logging.getLogger(__name__)


class WebhookNotifier(BaseNotifier):
    """POST transitions as JSON to an HTTP endpoint."""

    def __init__(self, url: str, timeout: float = 10) -> None:
        self.url = url
        self.timeout = timeout

    def build_payload(self, host: HostConfig, state: str) -> dict[str, str]:
        return {
            "host": host.host,
            "label": host.label,
            "state": state,
            "time": rfc3339(now()),
        }

    def send(self, host: HostConfig, state: str) -> bool:
        """Send the payload; the response body and status are ignored."""
        try:
            httpx.post(self.url, json=self.build_payload(host, state), timeout=self.timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Failed to send webhook notification: {e}")
            return False

        logger.info(f"Webhook notification sent to {self.url}")
        return True
