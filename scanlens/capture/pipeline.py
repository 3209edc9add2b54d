"""Capture -> recognize -> classify -> normalize -> store orchestration."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Protocol

from ..config import constants
from .actions import ClipboardWriter, LinkOpener, open_first_link, open_link
from .classifier import ContentClassifier
from .errors import CaptureError, RecognitionError, UserCancelled
from .history import HistoryStore
from .imaging import CapturedImage
from .models import (
    CaptureCancelled,
    CaptureFailed,
    CaptureOutcome,
    CaptureSucceeded,
    SourceApp,
)
from .normalizer import normalize_text

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    RECOGNIZING = "recognizing"
    CLASSIFYING = "classifying"
    PERSISTING = "persisting"
    DONE = "done"


class CaptureProvider(Protocol):
    async def capture(self) -> CapturedImage:
        ...


class SourceAppProvider(Protocol):
    def probe(self) -> SourceApp:
        ...


class PresentationHooks(Protocol):
    def before_capture(self) -> None:
        ...

    def after_capture(self, outcome: CaptureOutcome) -> None:
        ...


class NullHooks:
    def before_capture(self) -> None:
        return None

    def after_capture(self, outcome: CaptureOutcome) -> None:
        return None


class _UnknownSource:
    def probe(self) -> SourceApp:
        return SourceApp(name=constants.UNKNOWN_SOURCE_APP)


class CapturePipeline:
    """Runs one capture at a time and commits successful scans to history.

    ``keep_line_breaks``, ``auto_copy`` and ``auto_open_links`` are plain
    attributes; the presentation layer flips them between runs.
    """

    def __init__(
        self,
        capture: CaptureProvider,
        classifier: ContentClassifier,
        history: HistoryStore,
        *,
        hooks: PresentationHooks | None = None,
        source_probe: SourceAppProvider | None = None,
        clipboard: ClipboardWriter | None = None,
        link_opener: LinkOpener = open_link,
        keep_line_breaks: bool = constants.DEFAULT_KEEP_LINE_BREAKS,
        auto_copy: bool = constants.DEFAULT_AUTO_COPY,
        auto_open_links: bool = constants.DEFAULT_AUTO_OPEN_LINKS,
        recognition_timeout: float | None = None,
    ) -> None:
        self._capture = capture
        self._classifier = classifier
        self._history = history
        self._hooks = hooks or NullHooks()
        self._source_probe = source_probe or _UnknownSource()
        self._clipboard = clipboard
        self._link_opener = link_opener
        self.keep_line_breaks = keep_line_breaks
        self.auto_copy = auto_copy
        self.auto_open_links = auto_open_links
        self.recognition_timeout = recognition_timeout
        self.state = PipelineState.IDLE
        self._running = False

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self) -> CaptureOutcome:
        if self._running:
            logger.warning("capture requested while another run is active")
            return CaptureFailed("capture already in progress")

        self._running = True
        outcome: CaptureOutcome = CaptureFailed("capture did not complete")
        try:
            self._hooks.before_capture()
            outcome = await self._run_once()
        finally:
            self.state = PipelineState.IDLE
            self._running = False
            self._hooks.after_capture(outcome)
        return outcome

    async def _run_once(self) -> CaptureOutcome:
        source = self._probe_source()

        self.state = PipelineState.CAPTURING
        try:
            captured = await self._capture.capture()
        except UserCancelled:
            logger.info("capture cancelled by user")
            return CaptureCancelled()
        except CaptureError as exc:
            logger.warning("capture failed: %s", exc)
            return CaptureFailed(f"capture failed: {exc}", exc)

        self.state = PipelineState.RECOGNIZING
        try:
            recognized = await self._recognize(captured)
        except asyncio.TimeoutError as exc:
            logger.warning("recognition timed out after %ss", self.recognition_timeout)
            return CaptureFailed("recognition timed out", exc)
        except RecognitionError as exc:
            logger.warning("recognition failed: %s", exc)
            return CaptureFailed(f"recognition failed: {exc}", exc)
        except Exception as exc:
            logger.exception("unexpected recognition error")
            return CaptureFailed(f"recognition failed: {exc}", exc)

        self.state = PipelineState.CLASSIFYING
        text = normalize_text(recognized.content, self.keep_line_breaks)

        self.state = PipelineState.PERSISTING
        record = await asyncio.to_thread(
            self._history.insert,
            text,
            source.name,
            source.app_id,
            str(captured.path),
            recognized.content_type,
            title_text=recognized.content,
        )
        logger.info("stored %s scan %s from %s", record.content_type.value, record.id, record.source_app)

        self._post_actions(text)
        self.state = PipelineState.DONE
        return CaptureSucceeded(record)

    async def _recognize(self, captured: CapturedImage):
        if self.recognition_timeout:
            return await asyncio.wait_for(
                self._classifier.process(captured.image), self.recognition_timeout
            )
        return await self._classifier.process(captured.image)

    def _probe_source(self) -> SourceApp:
        try:
            return self._source_probe.probe()
        except Exception as exc:
            logger.debug("source application probe failed: %s", exc)
            return SourceApp(name=constants.UNKNOWN_SOURCE_APP)

    def _post_actions(self, text: str) -> None:
        if self.auto_copy and self._clipboard is not None:
            try:
                self._clipboard.write_text(text)
            except Exception as exc:
                logger.debug("auto copy failed: %s", exc)

        if self.auto_open_links:
            try:
                open_first_link(text, self._link_opener)
            except Exception as exc:
                logger.debug("auto open link failed: %s", exc)
