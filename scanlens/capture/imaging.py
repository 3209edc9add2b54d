"""Loading and validating captured screenshots."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps

from .errors import InvalidImageData


@dataclass(frozen=True)
class CapturedImage:
    """Decoded capture and the file it came from."""

    image: Image.Image
    path: Path


def load_image(path: str | Path) -> CapturedImage:
    """Decode the image at ``path`` into an RGB bitmap."""

    source = Path(path)
    try:
        raw_bytes = source.read_bytes()
    except OSError as exc:
        raise InvalidImageData(f"unable to read captured image {source}") from exc
    try:
        with Image.open(BytesIO(raw_bytes)) as img:
            normalized = ImageOps.exif_transpose(img).convert("RGB")
            normalized.load()
    except (Image.UnidentifiedImageError, OSError, ValueError) as exc:
        raise InvalidImageData(f"unable to decode image data at {source}") from exc

    return CapturedImage(image=normalized, path=source)
