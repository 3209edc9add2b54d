"""Pydantic API schemas for the scan history surface."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


class ScanSchema(BaseModel):
    id: str
    title: str
    timestamp: datetime
    content: str
    source_app: str
    source_app_id: Optional[str] = None
    image_ref: Optional[str] = None
    content_type: str
    icon: str
    badge: str
    has_link: bool
    age: str


class ScanListResponse(BaseModel):
    scans: List[ScanSchema]
    selected_id: Optional[str] = None


class CaptureResponse(BaseModel):
    status: str
    message: str
    scan: Optional[ScanSchema] = None


class ActionResponse(BaseModel):
    action: str
    success: bool
    message: str
    payload: Dict[str, object]


class PipelineSettingsSchema(BaseModel):
    keep_line_breaks: bool
    auto_copy: bool
    auto_open_links: bool


class PipelineSettingsUpdate(BaseModel):
    keep_line_breaks: Optional[bool] = None
    auto_copy: Optional[bool] = None
    auto_open_links: Optional[bool] = None
