"""Data models for host checks and dispatch assignments."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pulse.config import HostConfig


def now() -> datetime:
    """Current local time, timezone-aware so it renders as RFC 3339."""
    return datetime.now().astimezone()


def rfc3339(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


@dataclass(frozen=True)
class HostStatus:
    """One health check snapshot. A poll cycle replaces the whole set."""

    config: HostConfig
    online: bool
    last_check: datetime = field(default_factory=now)
    cpu: str | None = None  # load average
    memory: str | None = None  # used/total
    disk: str | None = None  # used%
    uptime: str | None = None
    error: str | None = None

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def label(self) -> str:
        return self.config.label

    def summary(self) -> str:
        """Short one-line detail: the error when down, known metrics when up."""
        if not self.online:
            return self.error or "unreachable"

        parts = []
        for prefix, value in (
            ("load", self.cpu),
            ("mem", self.memory),
            ("disk", self.disk),
            ("up", self.uptime),
        ):
            if value:
                parts.append(f"{prefix}:{value}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "name": self.config.label,
            "host": self.config.host,
            "online": self.online,
        }
        for key in ("cpu", "memory", "disk", "uptime", "error"):
            value = getattr(self, key)
            if value:
                data[key] = value
        data["checked_at"] = rfc3339(self.last_check)
        return data


@dataclass
class HostHistory:
    """Recent online/offline observations for one host, newest last."""

    max_checks: int = 60
    checks: list[bool] = field(default_factory=list)
    times: list[datetime] = field(default_factory=list)

    def add(self, online: bool, when: datetime | None = None) -> None:
        self.checks.append(online)
        self.times.append(when or now())
        if len(self.checks) > self.max_checks:
            del self.checks[: len(self.checks) - self.max_checks]
            del self.times[: len(self.times) - self.max_checks]

    @property
    def uptime_percent(self) -> float:
        """Percentage of recorded checks that were online."""
        if not self.checks:
            return 0.0
        return sum(1 for c in self.checks if c) / len(self.checks) * 100

    @property
    def sparkline(self) -> str:
        return "".join("█" if c else "░" for c in self.checks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sparkline": self.sparkline,
            "uptime_percent": round(self.uptime_percent, 1),
            "check_count": len(self.checks),
        }


class AssignmentStatus(str, Enum):
    """Lifecycle of a dispatched work item."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    FAILED = "failed"


def assignment_id(issue_key: str, target: str) -> str:
    return f"{issue_key}→{target}"


@dataclass
class Assignment:
    """Links an issue to a target host or agent."""

    id: str
    issue_key: str
    summary: str
    target: str
    status: AssignmentStatus = AssignmentStatus.PENDING
    created_at: datetime = field(default_factory=now)
    updated_at: datetime = field(default_factory=now)
    note: str = ""

    @classmethod
    def create(cls, issue_key: str, summary: str, target: str) -> "Assignment":
        created = now()
        return cls(
            id=assignment_id(issue_key, target),
            issue_key=issue_key,
            summary=summary,
            target=target,
            created_at=created,
            updated_at=created,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "issue_key": self.issue_key,
            "summary": self.summary,
            "target": self.target,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if self.note:
            data["note"] = self.note
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Assignment":
        """Build from a persisted record. Raises KeyError/ValueError on bad input."""
        return cls(
            id=data["id"],
            issue_key=data["issue_key"],
            summary=data.get("summary", ""),
            target=data["target"],
            status=AssignmentStatus(data["status"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            note=data.get("note", ""),
        )
