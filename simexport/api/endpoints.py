"""
api/endpoints.py - FastAPI endpoints for record export

Exposes export_one / export_many over HTTP. Engine outcomes, failures
included, come back as result bodies with status 200; only malformed
requests and unknown formats are HTTP errors.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..bootstrap.config import ExportSettings
from ..errors import ExportError, MissingDataError
from ..exporters import (
    ExportOptions,
    ExportOrchestrator,
    get_encoder,
    list_formats,
)
from ..records import SimulationRecord, SimulationRecordPayload

logger = logging.getLogger("api.exports")


# =============================================================================
# API MODELS (Pydantic)
# =============================================================================

class ExportSettingsOverride(BaseModel):
    """Per-request option overrides."""
    format: str = Field(default="json", description="Export format: json, csv, pdf")
    output_path: Optional[str] = Field(default=None, description="Destination file (export dir if omitted)")
    include_state_diff: Optional[bool] = None
    include_resource_usage: Optional[bool] = None
    prettify: Optional[bool] = None
    delimiter: Optional[str] = None


class ExportOneRequest(ExportSettingsOverride):
    """Request model for a single-record export."""
    record: SimulationRecordPayload


class ExportManyRequest(ExportSettingsOverride):
    """Request model for a batch export."""
    records: List[SimulationRecordPayload] = Field(default_factory=list)


# =============================================================================
# API ROUTER
# =============================================================================

router = APIRouter(
    prefix="/api/v1/exports",
    tags=["exports"],
)


def get_orchestrator() -> ExportOrchestrator:
    """Orchestrator for one request, configured from the environment."""
    return ExportOrchestrator(settings=ExportSettings.from_env())


def _file_stem(name: str, fallback: str) -> str:
    """Last path component of a caller-supplied id, so defaults stay in the export dir."""
    stem = Path(name).name
    if stem in ("", ".", ".."):
        return fallback
    return stem


def _build_options(
    request: ExportSettingsOverride,
    settings: ExportSettings,
    default_name: str,
) -> ExportOptions:
    try:
        encoder = get_encoder(request.format)
        stem = _file_stem(default_name, "simulation")
        path = request.output_path or str(Path(settings.export_dir) / f"{stem}{encoder.file_extension}")
        overrides: Dict[str, Any] = {
            key: value
            for key, value in (
                ("include_state_diff", request.include_state_diff),
                ("include_resource_usage", request.include_resource_usage),
                ("prettify", request.prettify),
                ("delimiter", request.delimiter),
            )
            if value is not None
        }
        return ExportOptions.from_settings(settings, request.format, path, **overrides)
    except ExportError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "INVALID_OPTIONS", "message": str(e)})


def _to_records(payloads: List[SimulationRecordPayload]) -> List[SimulationRecord]:
    try:
        return [p.to_record() for p in payloads]
    except MissingDataError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())


@router.get("/formats")
def get_formats():
    """List supported export formats."""
    return {"formats": list_formats()}


@router.post("/one")
def export_one(
    request: ExportOneRequest,
    orchestrator: ExportOrchestrator = Depends(get_orchestrator),
):
    """
    Export one record.

    Returns:
        ExportResult as JSON.
    """
    record = _to_records([request.record])[0]
    options = _build_options(request, orchestrator.settings, record.record_id or "simulation")
    result = orchestrator.export_one(record, options.format, options.output_path, options)
    if not result.success:
        logger.warning(f"Export of {record.record_id} failed: {result.error.describe() if result.error else 'unknown'}")
    return result.to_dict()


@router.post("/many")
def export_many(
    request: ExportManyRequest,
    orchestrator: ExportOrchestrator = Depends(get_orchestrator),
):
    """
    Export records as one batch.

    Returns:
        BatchExportResult as JSON.
    """
    records = _to_records(request.records)
    options = _build_options(request, orchestrator.settings, "simulations")
    result = orchestrator.export_many(records, options.format, options.output_path, options)
    if result.failed:
        logger.warning(f"Batch export: {result.failed} of {result.total} record(s) failed")
    return result.to_dict()


def create_app(orchestrator: Optional[ExportOrchestrator] = None) -> FastAPI:
    """
    Create an app serving the export router.

    Args:
        orchestrator: Fixed orchestrator for every request (tests, embedding)
    """
    app = FastAPI(title="simexport", version="1.0.0")
    app.include_router(router)
    if orchestrator is not None:
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return app
