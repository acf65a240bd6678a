"""
records/enums.py - Simulation record enumerations.
"""

from enum import Enum


class Outcome(str, Enum):
    """Outcome of a simulated invocation."""
    SUCCESS = "Success"
    FAILURE = "Failure"


class ChangeKind(str, Enum):
    """Kind of storage change in a state diff."""
    CREATED = "Created"
    MODIFIED = "Modified"
    DELETED = "Deleted"
