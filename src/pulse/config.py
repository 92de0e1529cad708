"""Configuration management for Pulse."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_INTERVAL = 30
HOST_KEY_POLICIES = ("ignore", "tofu")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_config_path() -> Path:
    """Default location of the hosts file."""
    return Path.home() / ".config" / "pulse" / "hosts.yaml"


@dataclass(frozen=True)
class HostConfig:
    """Connection details for a single monitored host."""

    name: str
    host: str
    user: str
    port: int = 22
    key_file: str | None = None
    password: str | None = None
    label: str = ""

    def __post_init__(self) -> None:
        if not self.label:
            object.__setattr__(self, "label", self.name)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HostConfig":
        for required in ("host", "user"):
            if not data.get(required):
                raise ValueError(f"Host entry missing '{required}': {data!r}")

        name = data.get("name") or data["host"]
        return cls(
            name=name,
            host=data["host"],
            user=data["user"],
            port=data.get("port") or 22,
            key_file=data.get("key_file"),
            password=data.get("password"),
            label=data.get("label") or name,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "host": self.host,
            "user": self.user,
            "port": self.port,
        }
        if self.key_file:
            data["key_file"] = self.key_file
        if self.label != self.name:
            data["label"] = self.label
        return data


@dataclass(frozen=True)
class NotifyConfig:
    """Where to deliver up/down transition notifications."""

    webhook: str | None = None
    command: str | None = None  # {host} {label} {state} are substituted

    @property
    def enabled(self) -> bool:
        return bool(self.webhook or self.command)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotifyConfig":
        return cls(
            webhook=data.get("webhook") or None,
            command=data.get("command") or None,
        )


@dataclass
class SSHOptions:
    """Session settings shared by every health check."""

    dial_timeout: float = 5.0
    command_timeout: float | None = 30.0  # None disables the per-command deadline
    host_key_policy: str = "ignore"
    known_hosts_file: str = "~/.config/pulse/known_hosts"

    def __post_init__(self) -> None:
        if self.host_key_policy not in HOST_KEY_POLICIES:
            raise ValueError(
                f"Unknown host_key_policy {self.host_key_policy!r} "
                f"(expected one of: {', '.join(HOST_KEY_POLICIES)})"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SSHOptions":
        return cls(
            dial_timeout=data.get("dial_timeout", 5.0),
            command_timeout=data.get("command_timeout", 30.0),
            host_key_policy=data.get("host_key_policy", "ignore"),
            known_hosts_file=data.get("known_hosts_file", "~/.config/pulse/known_hosts"),
        )


@dataclass
class Config:
    """Main configuration for Pulse."""

    hosts: list[HostConfig] = field(default_factory=list)
    notify: NotifyConfig = field(default_factory=NotifyConfig)
    ssh: SSHOptions = field(default_factory=SSHOptions)
    interval: int = DEFAULT_INTERVAL  # seconds
    max_workers: int | None = None  # None = one worker per host
    dispatch_file: str | None = None
    log_level: str = "WARNING"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file."""
        path = Path(path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        interval = data.get("interval") or DEFAULT_INTERVAL
        if isinstance(interval, bool) or not isinstance(interval, int):
            raise ValueError(f"interval must be a whole number of seconds, got {interval!r}")
        if interval <= 0:
            interval = DEFAULT_INTERVAL

        log_level = str(data.get("log_level") or "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

        return cls(
            hosts=[HostConfig.from_dict(h) for h in data.get("hosts") or []],
            notify=NotifyConfig.from_dict(data.get("notify") or {}),
            ssh=SSHOptions.from_dict(data.get("ssh") or {}),
            interval=interval,
            max_workers=data.get("max_workers"),
            dispatch_file=data.get("dispatch_file"),
            log_level=log_level,
        )

    def get_host(self, name: str) -> HostConfig | None:
        """Get host by name."""
        for host in self.hosts:
            if host.name == name:
                return host
        return None

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)

        data: dict[str, Any] = {
            "interval": self.interval,
            "log_level": self.log_level,
            "hosts": [h.to_dict() for h in self.hosts],
        }
        if self.notify.enabled:
            data["notify"] = {
                k: v for k, v in (("webhook", self.notify.webhook), ("command", self.notify.command)) if v
            }
        if self.dispatch_file:
            data["dispatch_file"] = self.dispatch_file

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


SAMPLE_CONFIG = """\
# Pulse - Host Monitor Configuration
interval: 30  # seconds between checks

hosts:
  - name: example
    host: 192.168.1.100
    user: admin
    port: 22
    label: "Example Server"
    # key_file: ~/.ssh/id_ed25519
    # password: use key_file instead

# notify:
#   webhook: https://hooks.example.com/pulse
#   command: notify-send "Pulse" "{label} ({host}) is {state}"

# ssh:
#   dial_timeout: 5
#   command_timeout: 30
#   host_key_policy: ignore  # or "tofu" to pin keys on first use
"""


def write_default_config(path: str | Path) -> Path:
    """Write a commented sample configuration file."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_CONFIG)
    return path
