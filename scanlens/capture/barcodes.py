"""QR and barcode detection using OpenCV."""

from __future__ import annotations

import logging

import cv2
import numpy as np
from PIL import Image

from .errors import RecognitionError
from .models import CodePayload, Symbology

logger = logging.getLogger(__name__)

_BARCODE_TYPES = {
    "EAN_8": Symbology.EAN_8,
    "EAN_13": Symbology.EAN_13,
    "UPC_A": Symbology.UPC_A,
    "UPC_E": Symbology.UPC_E,
    "CODE_39": Symbology.CODE_39,
    "CODE_93": Symbology.CODE_93,
    "CODE_128": Symbology.CODE_128,
    "ITF": Symbology.ITF,
}


def to_cv2(image: Image.Image) -> np.ndarray:
    """PIL image to an OpenCV BGR array."""

    arr = np.asarray(image.convert("RGB"))
    return cv2.cvtColor(arr, cv2.COLOR_RGB2BGR)


def symbology_for(decoded_type: str) -> Symbology:
    return _BARCODE_TYPES.get(decoded_type.strip().upper(), Symbology.OTHER)


class OpenCVCodeDetector:
    """Finds QR codes and 1-D barcodes in a bitmap.

    Detectors are created per call, so concurrent calls never share state.
    """

    def __init__(self, *, detect_barcodes: bool = True) -> None:
        self.detect_barcodes = detect_barcodes

    def detect_codes(self, image: Image.Image) -> list[CodePayload]:
        try:
            frame = to_cv2(image)
            codes = self._detect_qr(frame)
            if self.detect_barcodes:
                codes.extend(self._detect_barcodes(frame))
        except cv2.error as exc:
            raise RecognitionError(f"code detection failed: {exc}") from exc
        return _dedupe(codes)

    def _detect_qr(self, frame: np.ndarray) -> list[CodePayload]:
        detector = cv2.QRCodeDetector()
        found, decoded_info, _points, _straight = detector.detectAndDecodeMulti(frame)
        if not found:
            return []
        return [
            CodePayload(payload=payload, symbology=Symbology.QR)
            for payload in decoded_info
            if payload
        ]

    def _detect_barcodes(self, frame: np.ndarray) -> list[CodePayload]:
        detector = cv2.barcode.BarcodeDetector()
        found, decoded_info, decoded_types, _points = detector.detectAndDecodeWithType(frame)
        if not found:
            return []
        codes = []
        for payload, decoded_type in zip(decoded_info, decoded_types):
            if not payload:
                continue
            codes.append(CodePayload(payload=payload, symbology=symbology_for(decoded_type)))
        return codes


def _dedupe(codes: list[CodePayload]) -> list[CodePayload]:
    seen: set[CodePayload] = set()
    unique = []
    for code in codes:
        if code in seen:
            continue
        seen.add(code)
        unique.append(code)
    if len(unique) != len(codes):
        logger.debug("dropped %d duplicate code detections", len(codes) - len(unique))
    return unique
