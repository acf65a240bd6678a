"""
history/source.py - Record lookup by id.

The engine does not own the history store. Callers hand it a HistorySource;
two implementations ship here: an in-memory one and one reading a JSON
history file (a list of payloads, or a structured export).
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, runtime_checkable

from ..errors import ExportError, FailureInfo, SerializationError
from ..records import SimulationRecord, parse_record

logger = logging.getLogger("history.source")


@runtime_checkable
class HistorySource(Protocol):
    """Supplies simulation records by id."""

    def fetch_record(self, record_id: str) -> Optional[SimulationRecord]:
        ...

    def fetch_records(self, record_ids: Sequence[str]) -> List[Optional[SimulationRecord]]:
        ...


class InMemoryHistorySource:
    """History held in a dict keyed by record id."""

    def __init__(self, records: Iterable[SimulationRecord] = ()):
        self._records: Dict[str, SimulationRecord] = {}
        for record in records:
            self.add(record)

    def add(self, record: SimulationRecord) -> None:
        self._records[record.record_id] = record

    def fetch_record(self, record_id: str) -> Optional[SimulationRecord]:
        return self._records.get(record_id)

    def fetch_records(self, record_ids: Sequence[str]) -> List[Optional[SimulationRecord]]:
        return [self.fetch_record(rid) for rid in record_ids]

    def record_ids(self) -> List[str]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)


class JsonHistorySource(InMemoryHistorySource):
    """
    History loaded from a JSON file.

    Entries that fail payload validation are kept out of the lookup table
    and listed in load_failures; asking for them yields None.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self.load_failures: List[FailureInfo] = []
        self._load()

    def _load(self) -> None:
        """
        Raises:
            SerializationError: file missing or not a history document
        """
        try:
            text = Path(self.path).read_text(encoding="utf-8")
            data = json.loads(text)
        except (OSError, ValueError) as e:
            raise SerializationError(f"cannot read history file {self.path}: {e}")

        for payload in self._entries(data):
            try:
                self.add(parse_record(payload))
            except ExportError as e:
                failure = FailureInfo.from_exception(e)
                self.load_failures.append(failure)
                logger.warning(f"Skipping history entry: {failure.describe()}")

        logger.info(f"Loaded {len(self)} record(s) from {self.path}")

    @staticmethod
    def _entries(data: Any) -> List[Any]:
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("entries"), list):
            return data["entries"]
        raise SerializationError("history file must hold a list of records or an 'entries' array")
