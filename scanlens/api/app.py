"""Local FastAPI surface over scan history and the capture pipeline."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException

from .. import __version__
from ..config import settings
from .schemas import (
    ActionResponse,
    CaptureResponse,
    PipelineSettingsSchema,
    PipelineSettingsUpdate,
    ScanListResponse,
    ScanSchema,
)
from .services import ScanService


def _not_found(record_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"scan {record_id} not found")


def create_app(service: ScanService) -> FastAPI:
    app = FastAPI(title="ScanLens API", version=__version__)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {
            "status": "ok",
            "history": str(service.history.path),
            "scans": str(len(service.history)),
            "last_capture": service.last_capture_status,
        }

    @app.get("/v1/scans", response_model=ScanListResponse)
    def list_scans() -> ScanListResponse:
        return service.list_scans()

    @app.delete("/v1/scans", response_model=ScanListResponse)
    def clear_scans() -> ScanListResponse:
        service.clear()
        return service.list_scans()

    @app.get("/v1/scans/{record_id}", response_model=ScanSchema)
    def get_scan(record_id: str) -> ScanSchema:
        scan = service.get_scan(record_id)
        if scan is None:
            raise _not_found(record_id)
        return scan

    @app.delete("/v1/scans/{record_id}", response_model=ScanListResponse)
    def delete_scan(record_id: str) -> ScanListResponse:
        if not service.delete(record_id):
            raise _not_found(record_id)
        return service.list_scans()

    @app.post("/v1/scans/{record_id}/select", response_model=ScanListResponse)
    def select_scan(record_id: str) -> ScanListResponse:
        listing = service.select(record_id)
        if listing is None:
            raise _not_found(record_id)
        return listing

    @app.post("/v1/scans/{record_id}/copy", response_model=ActionResponse)
    def copy_scan(record_id: str) -> ActionResponse:
        result = service.copy(record_id)
        if result is None:
            raise _not_found(record_id)
        return result

    @app.post("/v1/scans/{record_id}/open-link", response_model=ActionResponse)
    def open_scan_link(record_id: str) -> ActionResponse:
        result = service.open_scan_link(record_id)
        if result is None:
            raise _not_found(record_id)
        return result

    @app.post("/v1/scans/{record_id}/speak", response_model=ActionResponse)
    def speak_scan(record_id: str) -> ActionResponse:
        result = service.speak(record_id)
        if result is None:
            raise _not_found(record_id)
        return result

    @app.post("/v1/capture", response_model=CaptureResponse)
    async def capture() -> CaptureResponse:
        return await service.capture()

    @app.get("/v1/settings", response_model=PipelineSettingsSchema)
    def get_pipeline_settings() -> PipelineSettingsSchema:
        return service.pipeline_settings()

    @app.patch("/v1/settings", response_model=PipelineSettingsSchema)
    def update_pipeline_settings(update: PipelineSettingsUpdate) -> PipelineSettingsSchema:
        return service.update_pipeline_settings(update)

    return app


_app: FastAPI | None = None


def get_app() -> FastAPI:
    global _app
    if _app is None:
        _app = create_app(ScanService(settings.get_settings()))
    return _app
