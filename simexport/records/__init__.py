"""
records/ - Simulation record model

Immutable records, nested values and incoming payload validation.
"""

from .enums import Outcome, ChangeKind
from .values import (
    Value,
    ScalarValue,
    ArrayValue,
    MapValue,
    from_native,
    to_native,
    is_value,
)
from .schema import (
    ResourceUsage,
    StateChange,
    StateDiff,
    SimulationRecord,
)
from .payloads import (
    ResourceUsagePayload,
    StateChangePayload,
    SimulationRecordPayload,
    parse_record,
)

__all__ = [
    # Enums
    "Outcome",
    "ChangeKind",
    # Values
    "Value",
    "ScalarValue",
    "ArrayValue",
    "MapValue",
    "from_native",
    "to_native",
    "is_value",
    # Schema
    "ResourceUsage",
    "StateChange",
    "StateDiff",
    "SimulationRecord",
    # Payloads
    "ResourceUsagePayload",
    "StateChangePayload",
    "SimulationRecordPayload",
    "parse_record",
]
