"""Remote health data collection over SSH."""

from pulse.collectors.auth import AuthMethod, resolve_auth
from pulse.collectors.session import KnownHosts, RemoteSession
from pulse.collectors.ssh import SSHCollector, check_host

__all__ = ["AuthMethod", "KnownHosts", "RemoteSession", "SSHCollector", "check_host", "resolve_auth"]
