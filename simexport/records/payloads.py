"""
records/payloads.py - Pydantic models for incoming record payloads.

History stores and API callers hand records over as JSON. These models
validate the shape (camelCase keys) before conversion to SimulationRecord.
Fields the engine needs are optional here on purpose: an incomplete history
entry still becomes a record, and the encoders report it as MISSING_DATA.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .enums import ChangeKind, Outcome
from .schema import ResourceUsage, SimulationRecord, StateChange, StateDiff
from .values import from_native
from ..errors import MissingDataError


class ResourceUsagePayload(BaseModel):
    """Resource usage as reported by the simulator."""

    model_config = ConfigDict(populate_by_name=True)

    cpu_instructions: int = Field(..., ge=0, alias="cpuInstructions")
    memory_bytes: int = Field(..., ge=0, alias="memoryBytes")
    duration_ms: float = Field(..., ge=0, alias="durationMs")


class StateChangePayload(BaseModel):
    """A single storage change."""

    key: str = Field(..., min_length=1, description="Storage key")
    kind: ChangeKind
    before: Optional[Any] = None
    after: Optional[Any] = None


class SimulationRecordPayload(BaseModel):
    """A simulation history entry."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Opaque record id")
    contract_id: Optional[str] = Field(None, alias="contractId")
    function_name: Optional[str] = Field(None, alias="functionName")
    args: List[Any] = Field(default_factory=list)
    network: str = ""
    method: str = ""
    timestamp: Optional[datetime] = None
    outcome: Optional[Outcome] = None
    result: Optional[Any] = None
    error: Optional[Any] = None
    resource_usage: Optional[ResourceUsagePayload] = Field(None, alias="resourceUsage")
    state_diff: Optional[List[StateChangePayload]] = Field(None, alias="stateDiff")

    def to_record(self) -> SimulationRecord:
        """
        Convert to an immutable SimulationRecord.

        Presence is taken from the fields actually set on the payload, so an
        explicit JSON null result stays a present null.

        Raises:
            MissingDataError: a state change breaks its snapshot invariant
        """
        present = self.model_fields_set

        changes = None
        if self.state_diff is not None:
            try:
                changes = StateDiff(tuple(
                    StateChange(
                        key=c.key,
                        kind=c.kind,
                        before=from_native(c.before) if "before" in c.model_fields_set else None,
                        after=from_native(c.after) if "after" in c.model_fields_set else None,
                    )
                    for c in self.state_diff
                ))
            except ValueError as e:
                raise MissingDataError(self.id, [f"stateDiff: {e}"])

        usage = None
        if self.resource_usage is not None:
            usage = ResourceUsage(
                cpu_instructions=self.resource_usage.cpu_instructions,
                memory_bytes=self.resource_usage.memory_bytes,
                duration_ms=self.resource_usage.duration_ms,
            )

        return SimulationRecord(
            record_id=self.id,
            contract_id=self.contract_id or "",
            function_name=self.function_name or "",
            args=tuple(from_native(a) for a in self.args),
            network=self.network,
            method=self.method,
            timestamp=self.timestamp,
            outcome=self.outcome,
            result=from_native(self.result) if "result" in present else None,
            error=from_native(self.error) if "error" in present else None,
            resource_usage=usage,
            state_diff=changes,
        )


def parse_record(data: Dict[str, Any]) -> SimulationRecord:
    """
    Validate a raw payload and build a record.

    Raises:
        MissingDataError: payload does not match the record schema
    """
    try:
        payload = SimulationRecordPayload.model_validate(data)
    except ValidationError as e:
        record_id = data.get("id") if isinstance(data, dict) else None
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise MissingDataError(record_id if isinstance(record_id, str) else None, problems)
    return payload.to_record()
