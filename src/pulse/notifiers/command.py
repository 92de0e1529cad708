"""Local shell command notification handler."""

import logging
import subprocess

from pulse.config import HostConfig
from pulse.notifiers.base import BaseNotifier

logger = logging.getLogger(__name__)


def render_command(template: str, host: HostConfig, state: str) -> str:
    """Substitute {host}, {label} and {state} literally, without escaping."""
    return (
        template.replace("{host}", host.host)
        .replace("{label}", host.label)
        .replace("{state}", state)
    )


class CommandNotifier(BaseNotifier):
    """Run a templated shell command for each transition."""

    def __init__(self, template: str) -> None:
        self.template = template

    def send(self, host: HostConfig, state: str) -> bool:
        """Run the command; its exit status is not checked."""
        cmd = render_command(self.template, host, state)
        try:
            subprocess.run(cmd, shell=True, capture_output=True)
        except OSError as e:
            logger.warning(f"Notification command failed: {e}")
            return False
        return True
