"""Screen capture, recognition and scan history."""

from __future__ import annotations

from .classifier import ContentClassifier, classify
from .errors import (
    CaptureError,
    ClipboardUnavailable,
    InvalidImageData,
    LaunchFailed,
    RecognitionError,
    RecognizerUnavailable,
    ScanLensError,
    SpeechUnavailable,
    UserCancelled,
)
from .history import HistoryEvent, HistoryStore, JsonHistoryFile, load_history
from .models import (
    CaptureCancelled,
    CaptureFailed,
    CaptureOutcome,
    CaptureSucceeded,
    CodePayload,
    ContentType,
    RecognizedContent,
    ScanRecord,
    SourceApp,
    Symbology,
    format_age,
)
from .normalizer import find_first_link, normalize_text
from .pipeline import CapturePipeline, PipelineState

__all__ = [
    "ContentClassifier",
    "classify",
    "CaptureError",
    "ClipboardUnavailable",
    "InvalidImageData",
    "LaunchFailed",
    "RecognitionError",
    "RecognizerUnavailable",
    "ScanLensError",
    "SpeechUnavailable",
    "UserCancelled",
    "HistoryEvent",
    "HistoryStore",
    "JsonHistoryFile",
    "load_history",
    "CaptureCancelled",
    "CaptureFailed",
    "CaptureOutcome",
    "CaptureSucceeded",
    "CodePayload",
    "ContentType",
    "RecognizedContent",
    "ScanRecord",
    "SourceApp",
    "Symbology",
    "format_age",
    "find_first_link",
    "normalize_text",
    "CapturePipeline",
    "PipelineState",
]
