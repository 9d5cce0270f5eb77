"""
SCM Poll Environment

Reconstructs the environment of a job's previous build so that source-control
polling can expand the same variables the build would have seen.
"""

__version__ = "0.1.0"

from .config import Settings
from .environment import Environment, MergePolicy
from .exceptions import InvalidStateError, PollEnvironmentError
from .resolver import PollEnvironmentResolver, resolve_poll_environment

__all__ = [
    "Settings",
    "Environment",
    "MergePolicy",
    "PollEnvironmentError",
    "InvalidStateError",
    "PollEnvironmentResolver",
    "resolve_poll_environment",
]
