"""User-facing actions over stored scan records."""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable, Protocol

from .models import ScanRecord
from .normalizer import find_first_link

logger = logging.getLogger(__name__)

LinkOpener = Callable[[str], object]


class ClipboardWriter(Protocol):
    def write_text(self, value: str) -> None:
        ...


class Speaker(Protocol):
    def speak(self, text: str) -> bool:
        ...


def open_link(url: str) -> bool:
    return webbrowser.open(url)


def copy_record(record: ScanRecord, clipboard: ClipboardWriter) -> None:
    clipboard.write_text(record.content)


def open_first_link(text: str, opener: LinkOpener = open_link) -> str | None:
    """Open the first link in ``text``; returns it, or None when there is none."""

    url = find_first_link(text)
    if url is None:
        return None
    logger.info("opening link %s", url)
    opener(url)
    return url


def open_record_link(record: ScanRecord, opener: LinkOpener = open_link) -> str | None:
    return open_first_link(record.content, opener)


def speak_record(record: ScanRecord, speaker: Speaker) -> bool:
    return speaker.speak(record.content)
