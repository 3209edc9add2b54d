"""Reconcile OCR text and code payloads into one classified result."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from PIL import Image

from .models import CodePayload, ContentType, RecognizedContent, Symbology

logger = logging.getLogger(__name__)


class TextRecognizer(Protocol):
    def recognize(self, image: Image.Image) -> str:
        ...


class CodeDetector(Protocol):
    def detect_codes(self, image: Image.Image) -> list[CodePayload]:
        ...


def classify(text: str, codes: Sequence[CodePayload]) -> RecognizedContent:
    """Code payloads win over OCR text whenever any were detected."""

    has_qr = any(code.symbology == Symbology.QR for code in codes)
    if codes:
        content = "\n".join(code.payload for code in codes)
    else:
        content = text

    if has_qr:
        content_type = ContentType.QRCODE
    elif codes:
        content_type = ContentType.BARCODE
    else:
        content_type = ContentType.TEXT

    return RecognizedContent(
        text=text,
        codes=tuple(codes),
        has_qr=has_qr,
        content=content,
        content_type=content_type,
    )


class ContentClassifier:
    def __init__(self, recognizer: TextRecognizer, detector: CodeDetector) -> None:
        self._recognizer = recognizer
        self._detector = detector

    async def process(self, image: Image.Image) -> RecognizedContent:
        """Run both recognition passes concurrently, then classify.

        Either failure propagates unchanged; no partial result is built.
        """

        text, codes = await asyncio.gather(
            asyncio.to_thread(self._recognizer.recognize, image),
            asyncio.to_thread(self._detector.detect_codes, image),
        )
        result = classify(text, codes)
        logger.debug(
            "recognized %d chars of text and %d codes -> %s",
            len(text),
            len(result.codes),
            result.content_type.value,
        )
        return result
