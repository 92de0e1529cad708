"""Core host monitoring logic."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable

from pulse.collectors import KnownHosts, check_host
from pulse.config import Config, HostConfig
from pulse.models import HostHistory, HostStatus, now
from pulse.notifiers import Notifier
from pulse.tracker import StateTracker

logger = logging.getLogger(__name__)

Checker = Callable[[HostConfig], HostStatus]


def check_all(
    hosts: list[HostConfig],
    checker: Checker = check_host,
    max_workers: int | None = None,
) -> list[HostStatus]:
    """Check every host concurrently.

    Args:
        hosts: Hosts in configuration order.
        checker: Per-host check; expected not to raise.
        max_workers: Pool size. None starts one worker per host.

    Returns:
        One HostStatus per host, in the same order as ``hosts`` regardless of
        which check finished first.
    """
    if not hosts:
        logger.warning("No hosts configured")
        return []

    results: list = [None] * len(hosts)
    workers = max_workers or len(hosts)
    started = now()

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pulse-check") as executor:
        futures = {executor.submit(checker, host): i for i, host in enumerate(hosts)}

        for future in as_completed(futures):
            index = futures[future]
            try:
                results[index] = future.result()
            except Exception as e:
                host = hosts[index]
                logger.error(f"Failed to check host {host.name}: {e}")
                results[index] = HostStatus(
                    config=host, online=False, last_check=started, error=str(e)
                )

    return results


class HostMonitor:
    """Runs poll cycles: fan-out, transition tracking, history."""

    def __init__(
        self,
        config: Config,
        checker: Checker | None = None,
        tracker: StateTracker | None = None,
    ) -> None:
        self.config = config
        self.known_hosts = (
            KnownHosts(Path(config.ssh.known_hosts_file))
            if config.ssh.host_key_policy == "tofu"
            else None
        )
        self.checker = checker or self._check_host
        self.tracker = tracker or StateTracker(Notifier.from_config(config.notify))
        self.history: dict[str, HostHistory] = {h.name: HostHistory() for h in config.hosts}
        self._last_results: list[HostStatus] = []

    def _check_host(self, host: HostConfig) -> HostStatus:
        return check_host(host, options=self.config.ssh, known_hosts=self.known_hosts)

    def check_all(self) -> list[HostStatus]:
        """Check all configured hosts once, in configuration order."""
        return check_all(self.config.hosts, self.checker, self.config.max_workers)

    def poll(self) -> tuple[list[HostStatus], list[str]]:
        """Run one cycle and return (results, transition messages)."""
        started = now()
        results = self.check_all()
        transitions = self.tracker.update(results)

        for status in results:
            history = self.history.setdefault(status.config.name, HostHistory())
            history.add(status.online, status.last_check)

        online = sum(1 for r in results if r.online)
        elapsed = (now() - started).total_seconds()
        logger.info(f"Checked {len(results)} hosts in {elapsed:.1f}s: {online} up")

        self._last_results = results
        return results, transitions

    def run(
        self,
        on_cycle: Callable[[list[HostStatus], list[str]], None] | None = None,
        once: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Poll forever (or once), sleeping ``interval`` seconds between cycles."""
        while True:
            results, transitions = self.poll()
            if on_cycle is not None:
                on_cycle(results, transitions)
            if once:
                return
            sleep(self.config.interval)

    def get_last_results(self) -> list[HostStatus]:
        return list(self._last_results)

    def to_dict(self, results: list[HostStatus] | None = None) -> list[dict]:
        """JSON-ready results with each host's history attached."""
        rows = []
        for status in results if results is not None else self._last_results:
            row = status.to_dict()
            history = self.history.get(status.config.name)
            if history is not None and history.checks:
                row.update(history.to_dict())
            rows.append(row)
        return rows
