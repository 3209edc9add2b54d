"""Service layer shared by the HTTP API and the CLI."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..capture.actions import (
    ClipboardWriter,
    LinkOpener,
    Speaker,
    copy_record,
    open_link,
    open_record_link,
    speak_record,
)
from ..capture.barcodes import OpenCVCodeDetector
from ..capture.classifier import ContentClassifier
from ..capture.errors import ClipboardUnavailable, SpeechUnavailable
from ..capture.history import HistoryStore
from ..capture.models import (
    CaptureCancelled,
    CaptureOutcome,
    CaptureSucceeded,
    ScanRecord,
    format_age,
)
from ..capture.pipeline import CapturePipeline
from ..capture.session import SourceAppProbe
from ..capture.speech import SystemSpeaker
from ..capture.system_capture import ScreenCapture
from ..capture.system_clipboard import SystemClipboard
from ..capture.system_ocr import TesseractRecognizer
from ..config.settings import Settings
from .schemas import (
    ActionResponse,
    CaptureResponse,
    PipelineSettingsSchema,
    PipelineSettingsUpdate,
    ScanListResponse,
    ScanSchema,
)

logger = logging.getLogger(__name__)


class ScanService:
    """Owns the history store and the capture pipeline for one process."""

    def __init__(
        self,
        settings: Settings,
        *,
        history: HistoryStore | None = None,
        pipeline: CapturePipeline | None = None,
        clipboard: ClipboardWriter | None = None,
        speaker: Speaker | None = None,
        link_opener: LinkOpener = open_link,
    ) -> None:
        self._settings = settings
        self.history = history if history is not None else HistoryStore.load(settings.history_file)
        self._clipboard = clipboard
        self._speaker = speaker
        self._link_opener = link_opener
        self._pipeline = pipeline
        self.last_outcome: CaptureOutcome | None = None

    @property
    def pipeline(self) -> CapturePipeline:
        if self._pipeline is None:
            self._pipeline = self._build_pipeline()
        return self._pipeline

    def _build_pipeline(self) -> CapturePipeline:
        cfg = self._settings
        clipboard, error = self._resolve_clipboard()
        if error is not None:
            logger.info("auto copy disabled: %s", error)
        classifier = ContentClassifier(TesseractRecognizer(lang=cfg.ocr_lang), OpenCVCodeDetector())
        return CapturePipeline(
            ScreenCapture(cfg.capture_dir, tool=cfg.capture_tool or None),
            classifier,
            self.history,
            hooks=self,
            source_probe=SourceAppProbe(),
            clipboard=clipboard,
            link_opener=self._link_opener,
            keep_line_breaks=cfg.keep_line_breaks,
            auto_copy=cfg.auto_copy,
            auto_open_links=cfg.auto_open_links,
            recognition_timeout=cfg.recognition_timeout,
        )

    def before_capture(self) -> None:
        logger.debug("capture starting")

    def after_capture(self, outcome: CaptureOutcome) -> None:
        self.last_outcome = outcome

    @property
    def last_capture_status(self) -> str:
        return self.last_outcome.status if self.last_outcome is not None else "none"

    async def capture(self) -> CaptureResponse:
        outcome = await self.pipeline.run()
        self.last_outcome = outcome
        if isinstance(outcome, CaptureSucceeded):
            return CaptureResponse(
                status=outcome.status,
                message="scan stored",
                scan=self.to_schema(outcome.record),
            )
        if isinstance(outcome, CaptureCancelled):
            return CaptureResponse(status=outcome.status, message="capture cancelled")
        return CaptureResponse(status=outcome.status, message=outcome.reason)

    def list_scans(self) -> ScanListResponse:
        now = datetime.now(timezone.utc)
        return ScanListResponse(
            scans=[self.to_schema(record, now) for record in self.history.records],
            selected_id=self.history.selected_id,
        )

    def get_scan(self, record_id: str) -> ScanSchema | None:
        record = self.history.get(record_id)
        return self.to_schema(record) if record is not None else None

    def select(self, record_id: str) -> ScanListResponse | None:
        try:
            self.history.select(record_id)
        except KeyError:
            return None
        return self.list_scans()

    def delete(self, record_id: str) -> bool:
        return self.history.delete(record_id)

    def clear(self) -> None:
        self.history.clear()

    def copy(self, record_id: str) -> ActionResponse | None:
        record = self.history.get(record_id)
        if record is None:
            return None
        clipboard, error = self._resolve_clipboard()
        if error is not None or clipboard is None:
            return self._failure(action="copy", record=record, message=error or "clipboard unavailable")
        try:
            copy_record(record, clipboard)
        except Exception as exc:
            return self._failure(action="copy", record=record, message=f"copy failed: {exc}")
        return ActionResponse(
            action="copy",
            success=True,
            message="content copied",
            payload={"id": record.id, "chars": len(record.content)},
        )

    def open_scan_link(self, record_id: str) -> ActionResponse | None:
        record = self.history.get(record_id)
        if record is None:
            return None
        try:
            url = open_record_link(record, self._link_opener)
        except Exception as exc:
            return self._failure(action="open_link", record=record, message=f"open link failed: {exc}")
        if url is None:
            return self._failure(action="open_link", record=record, message="no link found")
        return ActionResponse(
            action="open_link",
            success=True,
            message="link opened",
            payload={"id": record.id, "url": url},
        )

    def speak(self, record_id: str) -> ActionResponse | None:
        record = self.history.get(record_id)
        if record is None:
            return None
        speaker, error = self._resolve_speaker()
        if error is not None or speaker is None:
            return self._failure(action="speak", record=record, message=error or "speech unavailable")
        try:
            started = speak_record(record, speaker)
        except Exception as exc:
            return self._failure(action="speak", record=record, message=f"speech failed: {exc}")
        return ActionResponse(
            action="speak",
            success=True,
            message="speaking" if started else "speech stopped",
            payload={"id": record.id, "speaking": started},
        )

    def is_speaking(self) -> bool:
        return bool(getattr(self._speaker, "is_speaking", False))

    def stop_speaking(self) -> None:
        stop = getattr(self._speaker, "stop", None)
        if callable(stop):
            stop()

    def pipeline_settings(self) -> PipelineSettingsSchema:
        pipeline = self.pipeline
        return PipelineSettingsSchema(
            keep_line_breaks=pipeline.keep_line_breaks,
            auto_copy=pipeline.auto_copy,
            auto_open_links=pipeline.auto_open_links,
        )

    def update_pipeline_settings(self, update: PipelineSettingsUpdate) -> PipelineSettingsSchema:
        pipeline = self.pipeline
        if update.keep_line_breaks is not None:
            pipeline.keep_line_breaks = update.keep_line_breaks
        if update.auto_copy is not None:
            pipeline.auto_copy = update.auto_copy
        if update.auto_open_links is not None:
            pipeline.auto_open_links = update.auto_open_links
        return self.pipeline_settings()

    @staticmethod
    def to_schema(record: ScanRecord, now: datetime | None = None) -> ScanSchema:
        return ScanSchema(
            id=record.id,
            title=record.title,
            timestamp=record.timestamp,
            content=record.content,
            source_app=record.source_app,
            source_app_id=record.source_app_id,
            image_ref=record.image_ref,
            content_type=record.content_type.value,
            icon=record.content_type.icon,
            badge=record.content_type.badge,
            has_link=record.has_link,
            age=format_age(record.timestamp, now),
        )

    def _resolve_clipboard(self) -> tuple[ClipboardWriter | None, str | None]:
        if self._clipboard is not None:
            return self._clipboard, None
        try:
            self._clipboard = SystemClipboard()
        except ClipboardUnavailable as exc:
            return None, f"clipboard unavailable: {exc}"
        return self._clipboard, None

    def _resolve_speaker(self) -> tuple[Speaker | None, str | None]:
        if self._speaker is not None:
            return self._speaker, None
        try:
            self._speaker = SystemSpeaker()
        except SpeechUnavailable as exc:
            return None, f"speech unavailable: {exc}"
        return self._speaker, None

    @staticmethod
    def _failure(*, action: str, record: ScanRecord, message: str) -> ActionResponse:
        return ActionResponse(action=action, success=False, message=message, payload={"id": record.id})
