"""
exporters/json_encoder.py - Structured (JSON) encoder.

Output shape, single record and batch alike:

    {"metadata": {"exportedAt": ..., "entryCount": N, "formatVersion": "1.0"},
     "entries": [<record>, ...]}
"""

from __future__ import annotations
import json
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Union

from .base import BaseEncoder
from .enums import ExportFormat
from .options import ExportOptions
from ..errors import SerializationError
from ..records import SimulationRecord

FORMAT_VERSION = "1.0"


def _check_finite(obj: Any, path: str, record_id: str) -> None:
    if isinstance(obj, float) and not math.isfinite(obj):
        raise SerializationError(f"non-finite number at {path}", record_id=record_id)
    if isinstance(obj, dict):
        for key, value in obj.items():
            _check_finite(value, f"{path}.{key}", record_id)
    elif isinstance(obj, list):
        for i, value in enumerate(obj):
            _check_finite(value, f"{path}[{i}]", record_id)


class JsonEncoder(BaseEncoder):
    """Encodes records as a JSON document."""

    format = ExportFormat.JSON
    content_type = "application/json"
    file_extension = ".json"

    def build_entry(self, record: SimulationRecord, options: ExportOptions) -> Dict[str, Any]:
        entry = record.to_dict()
        if not options.include_state_diff:
            entry.pop("stateDiff", None)
        if not options.include_resource_usage:
            entry.pop("resourceUsage", None)
        _check_finite(entry, "$", record.record_id)
        return entry

    def assemble(
        self,
        parts: Sequence[Dict[str, Any]],
        options: ExportOptions,
        batch: bool = False,
    ) -> bytes:
        document = {
            "metadata": {
                "exportedAt": datetime.now(timezone.utc).isoformat(),
                "entryCount": len(parts),
                "formatVersion": FORMAT_VERSION,
            },
            "entries": list(parts),
        }

        if options.resolved_prettify:
            dump_kwargs = {"indent": options.json_indent}
        else:
            dump_kwargs = {"separators": (",", ":")}

        try:
            text = json.dumps(document, ensure_ascii=False, allow_nan=False, **dump_kwargs)
        except (TypeError, ValueError) as e:
            raise SerializationError(str(e))
        return text.encode("utf-8")

    def decode(self, data: Union[bytes, str]) -> List[SimulationRecord]:
        """
        Parse a structured export back into records.

        Raises:
            SerializationError: data is not a structured export
        """
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            document = json.loads(data)
            entries = document["entries"]
            return [SimulationRecord.from_dict(entry) for entry in entries]
        except (ValueError, KeyError, TypeError) as e:
            raise SerializationError(f"not a structured export: {e}")
