"""SSH-based remote health collector."""

import logging
import re
from typing import Callable

from pulse.collectors.auth import AuthMethod, resolve_auth
from pulse.collectors.session import KnownHosts, RemoteSession
from pulse.config import HostConfig, SSHOptions
from pulse.errors import CommandError, ConnectError
from pulse.models import HostStatus, now

logger = logging.getLogger(__name__)

SessionFactory = Callable[..., RemoteSession]


def parse_load(output: str) -> str | None:
    """Linux: '0.10 0.20 0.30 1/234 5678'. macOS: '{ 1.23 1.45 1.67 }'."""
    parts = output.strip().strip("{}").split()
    if len(parts) < 3:
        return None
    return " ".join(parts[:3])


def parse_memory(output: str) -> str | None:
    """Return 'used/total' from `free -h`, or '<used>Mi/<total>Mi' from vm_stat."""
    for line in output.splitlines():
        if line.startswith("Mem:"):
            parts = line.split()
            if len(parts) >= 3:
                return f"{parts[2]}/{parts[1]}"
            return None

    if "Pages active" not in output:
        return None

    page_size = 4096
    match = re.search(r"page size of (\d+) bytes", output)
    if match:
        page_size = int(match.group(1))

    used_pages = 0
    total_bytes = 0
    for line in output.splitlines():
        line = line.strip()
        if line.startswith(("Pages active:", "Pages wired down:")):
            used_pages += int(line.split(":")[-1].strip().rstrip("."))
        elif line.isdigit():
            total_bytes = int(line)

    if total_bytes == 0:
        return None
    used_mib = used_pages * page_size // (1024 * 1024)
    total_mib = total_bytes // (1024 * 1024)
    return f"{used_mib}Mi/{total_mib}Mi"


def parse_disk(output: str) -> str | None:
    """Fifth column of the second `df -h /` row, e.g. '42%'."""
    lines = output.strip().splitlines()
    if len(lines) < 2:
        return None
    parts = lines[1].split()
    if len(parts) < 5:
        return None
    return parts[4]


def parse_uptime(output: str) -> str | None:
    """Keep `uptime -p` as is; trim plain `uptime` to just the duration."""
    text = output.strip()
    if not text:
        return None
    if text.startswith("up ") and "load" not in text:
        return text

    # " 9:41  up 3 days,  2:01, 2 users, load averages: 1.93 2.11 2.20"
    _, sep, rest = text.partition("up ")
    if not sep:
        return None
    kept = []
    for part in rest.split(","):
        part = part.strip()
        if "user" in part or "load" in part:
            break
        kept.append(part)
    return ", ".join(kept) or None


class SSHCollector:
    """Collect health metrics from a remote system via SSH.

    Reachability is authoritative: the host is online when a session opens.
    Metrics are best effort and each one may be missing.
    """

    # metric -> (command, parser). Each command chains its OS fallbacks.
    COMMANDS: dict[str, tuple[str, Callable[[str], str | None]]] = {
        "cpu": ("cat /proc/loadavg 2>/dev/null || sysctl -n vm.loadavg 2>/dev/null", parse_load),
        "memory": (
            "free -h 2>/dev/null || (vm_stat && sysctl -n hw.memsize) 2>/dev/null",
            parse_memory,
        ),
        "disk": ("df -h / 2>/dev/null", parse_disk),
        "uptime": ("uptime -p 2>/dev/null || uptime", parse_uptime),
    }

    def __init__(
        self,
        host: HostConfig,
        options: SSHOptions | None = None,
        known_hosts: KnownHosts | None = None,
        auth_resolver: Callable[[HostConfig], list[AuthMethod]] = resolve_auth,
        session_factory: SessionFactory = RemoteSession,
    ) -> None:
        self.host = host
        self.options = options or SSHOptions()
        self.known_hosts = known_hosts
        self.auth_resolver = auth_resolver
        self.session_factory = session_factory

    def connect(self) -> RemoteSession:
        methods = self.auth_resolver(self.host)
        session = self.session_factory(
            self.host,
            methods,
            dial_timeout=self.options.dial_timeout,
            command_timeout=self.options.command_timeout,
            known_hosts=self.known_hosts,
        )
        return session.open()

    def collect(self) -> HostStatus:
        """Run the health check. Never raises; failures become an offline status."""
        started = now()
        logger.info(f"Checking {self.host.label} ({self.host.host})")

        try:
            session = self.connect()
        except ConnectError as e:
            logger.warning(f"{self.host.label} ({self.host.host}) unreachable: {e}")
            return HostStatus(config=self.host, online=False, last_check=started, error=str(e))
        except Exception as e:
            logger.error(f"Unexpected error connecting to {self.host.label} ({self.host.host}): {e}")
            return HostStatus(config=self.host, online=False, last_check=started, error=str(e))

        try:
            metrics = {name: self._collect_metric(session, name) for name in self.COMMANDS}
        finally:
            session.close()

        return HostStatus(config=self.host, online=True, last_check=started, **metrics)

    def _collect_metric(self, session: RemoteSession, name: str) -> str | None:
        command, parse = self.COMMANDS[name]
        try:
            output = session.run(command)
        except CommandError as e:
            logger.debug(f"{name} check failed on {self.host.host}: {e}")
            return None
        except Exception as e:
            logger.warning(f"{name} check errored on {self.host.host}: {e}")
            return None

        try:
            return parse(output)
        except ValueError as e:
            logger.debug(f"Could not parse {name} output from {self.host.host}: {e}")
            return None


def check_host(
    host: HostConfig,
    options: SSHOptions | None = None,
    known_hosts: KnownHosts | None = None,
) -> HostStatus:
    """Check a single host with the default auth resolver and session."""
    return SSHCollector(host, options=options, known_hosts=known_hosts).collect()
