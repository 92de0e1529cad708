"""Persistent assignment of issues to target hosts.

The store keeps every assignment in memory behind one lock and writes the
whole set to a single JSON file on save(). Saving goes through a temporary
file and an atomic rename, so an interrupted write leaves the previous file
intact.
"""

import json
import logging
import os
import tempfile
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any

from pulse.errors import AssignmentNotFoundError, StoreFormatError
from pulse.models import Assignment, AssignmentStatus, now

logger = logging.getLogger(__name__)


def default_dispatch_path() -> Path:
    return Path.home() / ".pulse" / "dispatch.json"


class DispatchStore:
    """Thread-safe, file-backed collection of assignments."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser() if path else default_dispatch_path()
        self._lock = threading.Lock()
        self._assignments: list[Assignment] = []

    @classmethod
    def load(cls, path: str | Path | None = None) -> "DispatchStore":
        """Open a store, reading its file if it exists.

        A missing file gives an empty store.

        Raises:
            StoreFormatError: If the file exists but cannot be parsed.
        """
        store = cls(path)
        if not store.path.exists():
            logger.debug(f"No dispatch file at {store.path}, starting empty")
            return store

        try:
            with open(store.path, encoding="utf-8") as f:
                data = json.load(f)
            records = data.get("assignments") or []
            store._assignments = [Assignment.from_dict(r) for r in records]
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            raise StoreFormatError(f"parse dispatch file {store.path}: {e}") from e

        return store

    def _find(self, assignment_id: str) -> int:
        for i, a in enumerate(self._assignments):
            if a.id == assignment_id:
                return i
        raise AssignmentNotFoundError(f"assignment {assignment_id!r} not found")

    def assign(self, issue_key: str, summary: str, target: str) -> Assignment:
        """Create or fully replace the assignment for (issue_key, target)."""
        assignment = Assignment.create(issue_key, summary, target)
        with self._lock:
            for i, existing in enumerate(self._assignments):
                if existing.issue_key == issue_key and existing.target == target:
                    self._assignments[i] = assignment
                    break
            else:
                self._assignments.append(assignment)
            return replace(assignment)

    def update_status(
        self,
        assignment_id: str,
        status: AssignmentStatus | str,
        note: str = "",
    ) -> Assignment:
        """Set status and note on an assignment.

        Raises:
            AssignmentNotFoundError: If no assignment has this id.
            ValueError: If status is not a known AssignmentStatus.
        """
        status = AssignmentStatus(status)
        with self._lock:
            assignment = self._assignments[self._find(assignment_id)]
            assignment.status = status
            assignment.note = note
            assignment.updated_at = now()
            return replace(assignment)

    def get(self, assignment_id: str) -> Assignment | None:
        with self._lock:
            for a in self._assignments:
                if a.id == assignment_id:
                    return replace(a)
        return None

    def for_target(self, target: str) -> list[Assignment]:
        """All assignments for a target, in store order."""
        with self._lock:
            return [replace(a) for a in self._assignments if a.target == target]

    def all(self) -> list[Assignment]:
        with self._lock:
            return [replace(a) for a in self._assignments]

    def remove(self, assignment_id: str) -> None:
        """Delete an assignment.

        Raises:
            AssignmentNotFoundError: If no assignment has this id.
        """
        with self._lock:
            del self._assignments[self._find(assignment_id)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._assignments)

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {"assignments": [a.to_dict() for a in self._assignments]}

    def save(self) -> None:
        """Write the whole store to its file, replacing the previous content.

        The lock is held until the file is replaced, so overlapping saves
        land in order and mutations wait for the write to finish.
        """
        with self._lock:
            data = {"assignments": [a.to_dict() for a in self._assignments]}
            self.path.parent.mkdir(parents=True, exist_ok=True)

            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                    f.write("\n")
                    f.flush()
                    os.fsync(f.fileno())
                os.chmod(tmp_name, 0o644)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        logger.debug(f"Saved {len(data['assignments'])} assignments to {self.path}")
