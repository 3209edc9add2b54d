"""Text recognition over captured images using Tesseract."""

from __future__ import annotations

import logging
import shutil

import pytesseract
from PIL import Image, ImageOps

from ..config import constants
from .errors import RecognitionError, RecognizerUnavailable

logger = logging.getLogger(__name__)


class TesseractRecognizer:
    """Wrapper around pytesseract tuned for accuracy over screen regions.

    Uses the LSTM engine with fully automatic page segmentation so that
    multi-column captures come back in reading order.
    """

    def __init__(self, *, lang: str = constants.DEFAULT_OCR_LANG, oem: int = 1, psm: int = 3) -> None:
        self.lang = lang
        self.oem = oem
        self.psm = psm
        self._binary_available = bool(shutil.which("tesseract"))
        if not self._binary_available:
            logger.warning("Tesseract binary missing; text recognition will fail")

    @property
    def config(self) -> str:
        return f"--oem {self.oem} --psm {self.psm}"

    def recognize(self, image: Image.Image) -> str:
        if not self._binary_available:
            raise RecognizerUnavailable("tesseract is required for text recognition")

        prepared = ImageOps.autocontrast(image.convert("L"))
        try:
            raw = pytesseract.image_to_string(prepared, lang=self.lang, config=self.config)
        except (pytesseract.TesseractError, OSError, RuntimeError) as exc:
            raise RecognitionError(f"text recognition failed: {exc}") from exc

        lines = [line.strip() for line in raw.replace("\r", "").splitlines()]
        return "\n".join(line for line in lines if line)
