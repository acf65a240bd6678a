"""
simexport test configuration and fixtures

Shared simulation records covering the success, failure, state-diff and
incomplete-history cases.
"""

import pytest
from datetime import datetime, timezone

from simexport.records import (
    ChangeKind,
    Outcome,
    ResourceUsage,
    SimulationRecord,
    StateChange,
    StateDiff,
    from_native,
)


TIMESTAMP = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


def build_record(record_id: str = "sim-001", **overrides) -> SimulationRecord:
    """Complete successful record; keyword arguments replace fields."""
    fields = dict(
        record_id=record_id,
        contract_id="CDLZFC3SYJYDZT7K67VZ75HPJVIEUVNIXF47ZG2FB2RMQQVU2HHGCYSC",
        function_name="transfer",
        args=(from_native("GBRPYHIL2CI3FNQ4BXLFMNDLFJUNPU2HY3ZMFSHONUCEOASW7QC7OX2H"), from_native(100)),
        network="testnet",
        method="cli",
        timestamp=TIMESTAMP,
        outcome=Outcome.SUCCESS,
        result=from_native({"ok": True, "balance": 150}),
        resource_usage=ResourceUsage(cpu_instructions=1_500_000, memory_bytes=2048, duration_ms=12.5),
    )
    fields.update(overrides)
    return SimulationRecord(**fields)


@pytest.fixture
def success_record() -> SimulationRecord:
    """Successful record with two args and no state diff."""
    return build_record()


@pytest.fixture
def failure_record() -> SimulationRecord:
    return build_record(
        "sim-002",
        outcome=Outcome.FAILURE,
        result=None,
        error=from_native({"code": 10, "message": "insufficient balance"}),
    )


@pytest.fixture
def diff_record() -> SimulationRecord:
    """Successful record with one change of each kind."""
    return build_record(
        "sim-003",
        state_diff=StateDiff((
            StateChange("balance", ChangeKind.MODIFIED, before=from_native(100), after=from_native(150)),
            StateChange("allowance", ChangeKind.CREATED, after=from_native({"spender": "GXYZ", "amount": 5})),
            StateChange("nonce", ChangeKind.DELETED, before=from_native(7)),
        )),
    )


@pytest.fixture
def incomplete_record() -> SimulationRecord:
    """History entry that lost its outcome."""
    return build_record("sim-bad", outcome=None, result=None)


@pytest.fixture
def make_record():
    """Factory for records with field overrides."""
    return build_record
