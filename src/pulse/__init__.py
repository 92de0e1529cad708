"""
Pulse - SSH host monitor with transition alerts and an assignment store.

Checks a set of remote machines in parallel over SSH, reports which went up
or down since the last cycle, and keeps a small file-backed record of work
items dispatched to those machines.
"""

__version__ = "1.0.0"

from pulse.config import Config, HostConfig, NotifyConfig, SSHOptions
from pulse.dispatch import DispatchStore
from pulse.models import Assignment, AssignmentStatus, HostStatus
from pulse.monitor import HostMonitor, check_all
from pulse.tracker import StateTracker

__all__ = [
    "Assignment",
    "AssignmentStatus",
    "Config",
    "DispatchStore",
    "HostConfig",
    "HostMonitor",
    "HostStatus",
    "NotifyConfig",
    "SSHOptions",
    "StateTracker",
    "check_all",
]
