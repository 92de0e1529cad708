"""Authenticated SSH sessions built directly on a paramiko Transport."""

import logging
import socket
import threading
from pathlib import Path

import paramiko

from pulse.collectors.auth import AuthMethod
from pulse.config import HostConfig
from pulse.errors import CommandError, ConnectError

logger = logging.getLogger(__name__)


class KnownHosts:
    """Trust-on-first-use host key store shared by concurrent checks.

    The first key presented by a host is recorded in an OpenSSH-format
    known_hosts file. Any later key that differs fails the connection.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()
        self._keys = paramiko.HostKeys()
        if self.path.exists():
            self._keys.load(str(self.path))

    @staticmethod
    def entry_name(host: str, port: int) -> str:
        return host if port == 22 else f"[{host}]:{port}"

    def verify(self, host: str, port: int, key: paramiko.PKey) -> None:
        """Check a presented key, pinning it if the host is new.

        Raises:
            ConnectError: If a different key is already pinned for this host.
        """
        name = self.entry_name(host, port)
        with self._lock:
            known = self._keys.lookup(name)
            if known is None:
                logger.info(f"Pinning {key.get_name()} host key for {name}")
                self._keys.add(name, key.get_name(), key)
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._keys.save(str(self.path))
                return

            pinned = known.get(key.get_name())
            if pinned is None or pinned != key:
                raise ConnectError(f"ssh: host key for {name} does not match {self.path}")


class RemoteSession:
    """An authenticated SSH connection to one host.

    Use as a context manager, or call open()/close() explicitly. close() is
    safe to call more than once and on a session that never opened.
    """

    def __init__(
        self,
        host: HostConfig,
        methods: list[AuthMethod],
        dial_timeout: float = 5.0,
        command_timeout: float | None = 30.0,
        known_hosts: KnownHosts | None = None,
    ) -> None:
        self.host = host
        self.methods = methods
        self.dial_timeout = dial_timeout
        self.command_timeout = command_timeout
        self.known_hosts = known_hosts
        self._transport: paramiko.Transport | None = None

    @property
    def address(self) -> str:
        return f"{self.host.host}:{self.host.port}"

    def open(self) -> "RemoteSession":
        """Dial, handshake and authenticate. Never retries.

        Raises:
            ConnectError: On dial failure, handshake failure or when every
                authentication method is rejected.
        """
        if not self.methods:
            raise ConnectError("no usable authentication method")

        try:
            self._connect()
        except BaseException:
            self.close()
            raise

        return self

    def _connect(self) -> None:
        try:
            sock = socket.create_connection(
                (self.host.host, self.host.port), timeout=self.dial_timeout
            )
        except OSError as e:
            raise ConnectError(f"dial: {e}") from e

        transport = paramiko.Transport(sock)
        transport.banner_timeout = self.dial_timeout
        transport.auth_timeout = self.dial_timeout
        self._transport = transport

        try:
            transport.start_client(timeout=self.dial_timeout)
            if self.known_hosts is not None:
                self.known_hosts.verify(
                    self.host.host, self.host.port, transport.get_remote_server_key()
                )
            self._authenticate(transport)
        except (paramiko.SSHException, OSError, EOFError) as e:
            raise ConnectError(f"ssh: {e}") from e

    def _authenticate(self, transport: paramiko.Transport) -> None:
        user = self.host.user
        for method in self.methods:
            try:
                if method.kind == "password":
                    transport.auth_password(user, method.password)
                else:
                    for key in method.keys:
                        try:
                            transport.auth_publickey(user, key)
                        except paramiko.AuthenticationException:
                            continue
                        if transport.is_authenticated():
                            break
            except paramiko.AuthenticationException as e:
                logger.debug(f"{method.source} rejected by {self.address}: {e}")
                continue

            if transport.is_authenticated():
                logger.debug(f"Authenticated to {self.address} via {method.source}")
                return

        tried = ", ".join(m.kind for m in self.methods)
        raise ConnectError(f"ssh: unable to authenticate as {user} (tried {tried})")

    def run(self, command: str) -> str:
        """Execute a command and return its combined stdout and stderr.

        Raises:
            CommandError: If the command exits non-zero or the channel fails.
        """
        if self._transport is None or not self._transport.is_active():
            raise CommandError("session is not open")

        try:
            channel = self._transport.open_session(timeout=self.command_timeout)
        except (paramiko.SSHException, OSError) as e:
            raise CommandError(f"open channel: {e}") from e

        try:
            channel.set_combine_stderr(True)
            channel.settimeout(self.command_timeout)
            channel.exec_command(command)
            output = channel.makefile("rb").read().decode(errors="replace")
            exit_code = channel.recv_exit_status()
        except socket.timeout as e:
            raise CommandError(f"timed out after {self.command_timeout}s") from e
        except (paramiko.SSHException, OSError) as e:
            raise CommandError(str(e)) from e
        finally:
            channel.close()

        if exit_code != 0:
            raise CommandError(f"exited with status {exit_code}")
        return output

    def close(self) -> None:
        """Close the transport and any agent connections."""
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        for method in self.methods:
            method.close()

    def __enter__(self) -> "RemoteSession":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
