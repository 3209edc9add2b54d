"""System clipboard writer backed by the desktop clipboard helpers."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Sequence

from .errors import ClipboardUnavailable

logger = logging.getLogger(__name__)

HelperTable = Sequence[tuple[str, Sequence[str]]]


def find_helper(candidates: HelperTable) -> list[str] | None:
    """Command line of the first helper whose binary is on ``PATH``."""

    for binary, cmd in candidates:
        if shutil.which(binary):
            return list(cmd)
    return None


class SystemClipboard:
    """Writes text through wl-copy, xclip, xsel or pbcopy, whichever is present."""

    _WRITERS: HelperTable = (
        ("wl-copy", ("wl-copy",)),
        ("xclip", ("xclip", "-selection", "clipboard")),
        ("xsel", ("xsel", "--clipboard", "--input")),
        ("pbcopy", ("pbcopy",)),
    )

    def __init__(self) -> None:
        cmd = find_helper(self._WRITERS)
        if cmd is None:
            raise ClipboardUnavailable("no clipboard writer found; install wl-copy, xclip, xsel or pbcopy")
        self._cmd = cmd

    def write_text(self, value: str) -> None:
        logger.debug("writing %d chars with %s", len(value), self._cmd[0])
        subprocess.run(self._cmd, check=True, input=value, text=True)
