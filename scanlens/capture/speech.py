"""Read-aloud support through a command-line speech synthesizer."""

from __future__ import annotations

import logging
import subprocess

from .errors import SpeechUnavailable
from .system_clipboard import HelperTable, find_helper

logger = logging.getLogger(__name__)


class SystemSpeaker:
    """Speaks text in the background; a second ``speak`` stops playback."""

    _SPEAKERS: HelperTable = (
        ("spd-say", ("spd-say", "--wait")),
        ("espeak-ng", ("espeak-ng",)),
        ("espeak", ("espeak",)),
        ("say", ("say",)),
    )

    def __init__(self) -> None:
        self._cmd = find_helper(self._SPEAKERS)
        if self._cmd is None:
            raise SpeechUnavailable("no speech synthesizer found; install spd-say or espeak-ng")
        self._process: subprocess.Popen | None = None

    @property
    def is_speaking(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def speak(self, text: str) -> bool:
        """Start speaking ``text``; returns False when it stopped playback instead."""

        if self.is_speaking:
            self.stop()
            return False
        if not text.strip():
            return False
        self._process = subprocess.Popen(
            [*self._cmd, text],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        logger.debug("speaking %d chars with %s", len(text), self._cmd[0])
        return True

    def stop(self) -> None:
        process = self._process
        self._process = None
        if process is not None and process.poll() is None:
            process.terminate()
