"""Scan records, recognition payloads and capture outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ContentType(Enum):
    TEXT = "text"
    QRCODE = "qrcode"
    BARCODE = "barcode"

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def badge(self) -> str:
        return _BADGES[self]


_ICONS = {
    ContentType.TEXT: "viewfinder",
    ContentType.QRCODE: "qrcode",
    ContentType.BARCODE: "barcode",
}
_BADGES = {
    ContentType.TEXT: "",
    ContentType.QRCODE: "QR",
    ContentType.BARCODE: "BC",
}


class Symbology(Enum):
    QR = "qr"
    EAN_8 = "ean8"
    EAN_13 = "ean13"
    UPC_A = "upca"
    UPC_E = "upce"
    CODE_39 = "code39"
    CODE_93 = "code93"
    CODE_128 = "code128"
    ITF = "itf"
    OTHER = "other"


@dataclass(frozen=True)
class CodePayload:
    payload: str
    symbology: Symbology


@dataclass(frozen=True)
class RecognizedContent:
    """OCR text and detected codes reconciled into one payload."""

    text: str
    codes: tuple[CodePayload, ...]
    has_qr: bool
    content: str
    content_type: ContentType


@dataclass(frozen=True)
class ScanRecord:
    id: str
    title: str
    timestamp: datetime
    content: str
    source_app: str
    source_app_id: str | None = None
    image_ref: str | None = None
    content_type: ContentType = ContentType.TEXT

    @property
    def has_link(self) -> bool:
        if self.content_type == ContentType.QRCODE:
            return True
        return "http://" in self.content or "https://" in self.content

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "timestamp": self.timestamp.isoformat(),
            "content": self.content,
            "source_app": self.source_app,
            "source_app_id": self.source_app_id,
            "image_ref": self.image_ref,
            "content_type": self.content_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScanRecord":
        timestamp = datetime.fromisoformat(data["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            timestamp=timestamp,
            content=str(data["content"]),
            source_app=str(data["source_app"]),
            source_app_id=data.get("source_app_id"),
            image_ref=data.get("image_ref"),
            content_type=ContentType(data.get("content_type", ContentType.TEXT.value)),
        )


@dataclass(frozen=True)
class SourceApp:
    name: str
    app_id: str | None = None


@dataclass(frozen=True)
class CaptureSucceeded:
    record: ScanRecord
    status: str = field(default="success", init=False)


@dataclass(frozen=True)
class CaptureCancelled:
    status: str = field(default="cancelled", init=False)


@dataclass(frozen=True)
class CaptureFailed:
    reason: str
    error: BaseException | None = None
    status: str = field(default="failed", init=False)


CaptureOutcome = CaptureSucceeded | CaptureCancelled | CaptureFailed


def format_age(timestamp: datetime, now: datetime | None = None) -> str:
    """Short relative age label for history listings."""

    current = now or datetime.now(timezone.utc)
    seconds = (current - timestamp).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    if seconds < 172800:
        return "Yesterday"
    return f"{int(seconds // 86400)}d ago"
