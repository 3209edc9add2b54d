"""Unit tests for the Tesseract and OpenCV recognizers."""

from __future__ import annotations

import unittest
from unittest import mock

import cv2
import numpy as np
import pytesseract
from PIL import Image

from scanlens.capture.barcodes import OpenCVCodeDetector, symbology_for, to_cv2
from scanlens.capture.errors import RecognitionError, RecognizerUnavailable
from scanlens.capture.models import CodePayload, Symbology
from scanlens.capture.system_ocr import TesseractRecognizer


def _recognizer(available: bool = True, **kwargs) -> TesseractRecognizer:
    which = "/usr/bin/tesseract" if available else None
    with mock.patch("scanlens.capture.system_ocr.shutil.which", return_value=which):
        return TesseractRecognizer(**kwargs)


class TesseractRecognizerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.image = Image.new("RGB", (40, 20), "white")

    def test_lines_are_stripped_and_blank_lines_dropped(self) -> None:
        recognizer = _recognizer()
        raw = "  Invoice #2024-001 \r\n\n\nTotal: $450.00\n\f"
        with mock.patch("scanlens.capture.system_ocr.pytesseract.image_to_string", return_value=raw) as ocr:
            text = recognizer.recognize(self.image)
        self.assertEqual(text, "Invoice #2024-001\nTotal: $450.00")
        _, kwargs = ocr.call_args
        self.assertEqual(kwargs["lang"], "eng")
        self.assertEqual(kwargs["config"], "--oem 1 --psm 3")

    def test_image_is_prepared_as_grayscale(self) -> None:
        recognizer = _recognizer(lang="deu", psm=6)
        with mock.patch("scanlens.capture.system_ocr.pytesseract.image_to_string", return_value="") as ocr:
            recognizer.recognize(self.image)
        prepared = ocr.call_args.args[0]
        self.assertEqual(prepared.mode, "L")
        self.assertEqual(ocr.call_args.kwargs["lang"], "deu")
        self.assertEqual(recognizer.config, "--oem 1 --psm 6")

    def test_missing_binary_raises_unavailable(self) -> None:
        with self.assertLogs("scanlens.capture.system_ocr", level="WARNING"):
            recognizer = _recognizer(available=False)
        with self.assertRaises(RecognizerUnavailable):
            recognizer.recognize(self.image)

    def test_tesseract_error_becomes_recognition_error(self) -> None:
        recognizer = _recognizer()
        error = pytesseract.TesseractError(1, "bad language")
        with mock.patch("scanlens.capture.system_ocr.pytesseract.image_to_string", side_effect=error):
            with self.assertRaises(RecognitionError):
                recognizer.recognize(self.image)


class _FakeQRDetector:
    def __init__(self, result) -> None:
        self._result = result

    def detectAndDecodeMulti(self, frame):
        return self._result


class _FakeBarcodeDetector:
    def __init__(self, result) -> None:
        self._result = result

    def detectAndDecodeWithType(self, frame):
        return self._result


class OpenCVCodeDetectorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.image = Image.new("RGB", (32, 32), "white")

    def _detect(self, qr_result, barcode_result, **kwargs) -> list[CodePayload]:
        with mock.patch.object(
            cv2, "QRCodeDetector", return_value=_FakeQRDetector(qr_result)
        ), mock.patch.object(
            cv2.barcode,
            "BarcodeDetector",
            return_value=_FakeBarcodeDetector(barcode_result),
        ):
            return OpenCVCodeDetector(**kwargs).detect_codes(self.image)

    def test_qr_and_barcodes_are_combined_in_order(self) -> None:
        codes = self._detect(
            (True, ("https://example.com", "", "second"), None, None),
            (True, ("4006381333931",), ("EAN_13",), None),
        )
        self.assertEqual(
            codes,
            [
                CodePayload("https://example.com", Symbology.QR),
                CodePayload("second", Symbology.QR),
                CodePayload("4006381333931", Symbology.EAN_13),
            ],
        )

    def test_nothing_found(self) -> None:
        codes = self._detect((False, (), None, None), (False, (), (), None))
        self.assertEqual(codes, [])

    def test_duplicates_are_dropped(self) -> None:
        codes = self._detect((True, ("same", "same"), None, None), (False, (), (), None))
        self.assertEqual(codes, [CodePayload("same", Symbology.QR)])

    def test_barcodes_can_be_disabled(self) -> None:
        codes = self._detect(
            (False, (), None, None),
            (True, ("4006381333931",), ("EAN_13",), None),
            detect_barcodes=False,
        )
        self.assertEqual(codes, [])

    def test_opencv_error_becomes_recognition_error(self) -> None:
        detector = mock.Mock()
        detector.detectAndDecodeMulti.side_effect = cv2.error("broken frame")
        with mock.patch.object(cv2, "QRCodeDetector", return_value=detector):
            with self.assertRaises(RecognitionError):
                OpenCVCodeDetector().detect_codes(self.image)

    def test_symbology_mapping(self) -> None:
        self.assertEqual(symbology_for("EAN_8"), Symbology.EAN_8)
        self.assertEqual(symbology_for(" code_128 "), Symbology.CODE_128)
        self.assertEqual(symbology_for("PDF417"), Symbology.OTHER)

    def test_to_cv2_swaps_channels(self) -> None:
        frame = to_cv2(Image.new("RGB", (2, 2), (255, 0, 0)))
        self.assertEqual(frame.shape, (2, 2, 3))
        self.assertTrue(np.array_equal(frame[0, 0], np.array([0, 0, 255], dtype=np.uint8)))


if __name__ == "__main__":
    unittest.main()
