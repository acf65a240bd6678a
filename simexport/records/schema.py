"""
records/schema.py - Simulation record data structures.

Immutable value types describing one contract simulation outcome. Each type
provides to_dict() and from_dict() for the canonical camelCase mapping used
by the structured export and by history payloads.

Field declaration order is the serialization order.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .enums import ChangeKind, Outcome
from .values import Value, from_native, to_native
from ..errors import MissingDataError


# =============================================================================
# RESOURCE USAGE
# =============================================================================

@dataclass(frozen=True)
class ResourceUsage:
    """Resources consumed by a simulated invocation."""
    cpu_instructions: int = 0
    memory_bytes: int = 0
    duration_ms: float = 0.0

    def __post_init__(self):
        for name in ("cpu_instructions", "memory_bytes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if not isinstance(self.duration_ms, (int, float)) or not self.duration_ms >= 0:
            raise ValueError(f"duration_ms must be >= 0, got {self.duration_ms!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cpuInstructions": self.cpu_instructions,
            "memoryBytes": self.memory_bytes,
            "durationMs": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceUsage":
        return cls(
            cpu_instructions=data["cpuInstructions"],
            memory_bytes=data["memoryBytes"],
            duration_ms=data["durationMs"],
        )


# =============================================================================
# STATE DIFF
# =============================================================================

@dataclass(frozen=True)
class StateChange:
    """
    One storage change.

    INVARIANT: key is non-empty; MODIFIED carries before and after,
    CREATED only after, DELETED only before.
    """
    key: str
    kind: ChangeKind
    before: Optional[Value] = None
    after: Optional[Value] = None

    def __post_init__(self):
        if not self.key:
            raise ValueError("State change key must be non-empty")
        has_before = self.before is not None
        has_after = self.after is not None
        if self.kind == ChangeKind.MODIFIED and not (has_before and has_after):
            raise ValueError(f"Modified change '{self.key}' needs before and after snapshots")
        if self.kind == ChangeKind.CREATED and (has_before or not has_after):
            raise ValueError(f"Created change '{self.key}' carries only an after snapshot")
        if self.kind == ChangeKind.DELETED and (has_after or not has_before):
            raise ValueError(f"Deleted change '{self.key}' carries only a before snapshot")

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"key": self.key, "kind": self.kind.value}
        if self.before is not None:
            result["before"] = to_native(self.before)
        if self.after is not None:
            result["after"] = to_native(self.after)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StateChange":
        return cls(
            key=data["key"],
            kind=ChangeKind(data["kind"]),
            before=from_native(data["before"]) if "before" in data else None,
            after=from_native(data["after"]) if "after" in data else None,
        )


@dataclass(frozen=True)
class StateDiff:
    """Ordered storage changes caused by an invocation."""
    changes: Tuple[StateChange, ...] = ()

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self):
        return iter(self.changes)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def to_list(self) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in self.changes]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "StateDiff":
        return cls(tuple(StateChange.from_dict(item) for item in data))


# =============================================================================
# SIMULATION RECORD
# =============================================================================

@dataclass(frozen=True)
class SimulationRecord:
    """
    One simulation outcome, identified by an opaque id.

    Exactly one of result/error is present depending on outcome. Records
    coming from history may be incomplete; encoders call require_complete()
    before using one.
    """
    record_id: str
    contract_id: str
    function_name: str
    args: Tuple[Value, ...] = ()
    network: str = ""
    method: str = ""
    timestamp: Optional[datetime] = None
    outcome: Optional[Outcome] = None
    result: Optional[Value] = None
    error: Optional[Value] = None
    resource_usage: Optional[ResourceUsage] = None
    state_diff: Optional[StateDiff] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    def missing_fields(self) -> List[str]:
        """List completeness problems; empty when the record is exportable."""
        missing = []
        if not self.record_id:
            missing.append("id")
        if not self.contract_id:
            missing.append("contractId")
        if not self.function_name:
            missing.append("functionName")
        if self.timestamp is None:
            missing.append("timestamp")
        if self.outcome is None:
            missing.append("outcome")
        elif self.outcome == Outcome.SUCCESS:
            if self.result is None:
                missing.append("result")
            if self.error is not None:
                missing.append("error must be absent on Success")
        elif self.outcome == Outcome.FAILURE:
            if self.error is None:
                missing.append("error")
            if self.result is not None:
                missing.append("result must be absent on Failure")
        return missing

    def require_complete(self) -> None:
        """
        Raises:
            MissingDataError: record is missing required fields
        """
        missing = self.missing_fields()
        if missing:
            raise MissingDataError(self.record_id or None, missing)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary. Absent optional fields are omitted."""
        result: Dict[str, Any] = {
            "id": self.record_id,
            "contractId": self.contract_id,
            "functionName": self.function_name,
            "args": [to_native(a) for a in self.args],
            "network": self.network,
            "method": self.method,
        }
        if self.timestamp is not None:
            result["timestamp"] = self.timestamp.isoformat()
        if self.outcome is not None:
            result["outcome"] = self.outcome.value
        if self.result is not None:
            result["result"] = to_native(self.result)
        if self.error is not None:
            result["error"] = to_native(self.error)
        if self.resource_usage is not None:
            result["resourceUsage"] = self.resource_usage.to_dict()
        if self.state_diff is not None:
            result["stateDiff"] = self.state_diff.to_list()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationRecord":
        """Deserialize from dictionary produced by to_dict()."""
        timestamp = data.get("timestamp")
        outcome = data.get("outcome")
        usage = data.get("resourceUsage")
        diff = data.get("stateDiff")
        return cls(
            record_id=data.get("id", ""),
            contract_id=data.get("contractId", ""),
            function_name=data.get("functionName", ""),
            args=tuple(from_native(a) for a in data.get("args", [])),
            network=data.get("network", ""),
            method=data.get("method", ""),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
            outcome=Outcome(outcome) if outcome else None,
            result=from_native(data["result"]) if "result" in data else None,
            error=from_native(data["error"]) if "error" in data else None,
            resource_usage=ResourceUsage.from_dict(usage) if usage is not None else None,
            state_diff=StateDiff.from_list(diff) if diff is not None else None,
        )
