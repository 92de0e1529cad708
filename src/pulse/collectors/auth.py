"""Authentication method discovery for SSH sessions."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import paramiko

from pulse.config import HostConfig
from pulse.errors import NoAuthMethodError

logger = logging.getLogger(__name__)

DEFAULT_KEY_NAMES = ("id_ed25519", "id_ecdsa", "id_rsa")


@dataclass
class AuthMethod:
    """One way of authenticating, tried in list order by RemoteSession."""

    kind: str  # "agent", "key" or "password"
    source: str
    keys: list[paramiko.PKey] = field(default_factory=list)
    password: str | None = None
    agent: paramiko.Agent | None = field(default=None, repr=False)

    def close(self) -> None:
        """Release the agent connection, if this method holds one."""
        if self.agent is not None:
            self.agent.close()
            self.agent = None


def _agent_method() -> AuthMethod | None:
    if not os.environ.get("SSH_AUTH_SOCK"):
        return None
    try:
        agent = paramiko.Agent()
        keys = list(agent.get_keys())
    except (paramiko.SSHException, OSError) as e:
        logger.debug(f"SSH agent unavailable: {e}")
        return None
    if not keys:
        agent.close()
        return None
    return AuthMethod(kind="agent", source="ssh-agent", keys=keys, agent=agent)


def load_key(path: Path) -> paramiko.PKey | None:
    """Parse a private key file, returning None if it is missing or unusable."""
    try:
        return paramiko.PKey.from_path(path)
    except FileNotFoundError:
        return None
    except (
        OSError,
        TypeError,
        ValueError,
        paramiko.SSHException,
        paramiko.UnknownKeyType,
    ) as e:
        logger.debug(f"Skipping key {path}: {e}")
        return None


def resolve_auth(host: HostConfig, home: Path | None = None) -> list[AuthMethod]:
    """Build the ordered list of authentication methods for a host.

    Order: SSH agent, configured key file, default keys under ~/.ssh,
    then password. Keys that fail to parse are skipped.

    Raises:
        NoAuthMethodError: If nothing usable was found.
    """
    methods: list[AuthMethod] = []

    agent = _agent_method()
    if agent is not None:
        methods.append(agent)

    seen: set[Path] = set()
    if host.key_file:
        path = Path(host.key_file).expanduser()
        seen.add(path)
        key = load_key(path)
        if key is not None:
            methods.append(AuthMethod(kind="key", source=str(path), keys=[key]))

    ssh_dir = (home or Path.home()) / ".ssh"
    for name in DEFAULT_KEY_NAMES:
        path = ssh_dir / name
        if path in seen:
            continue
        key = load_key(path)
        if key is not None:
            methods.append(AuthMethod(kind="key", source=str(path), keys=[key]))

    if host.password:
        methods.append(AuthMethod(kind="password", source="password", password=host.password))

    if not methods:
        raise NoAuthMethodError("no usable authentication method")

    return methods
