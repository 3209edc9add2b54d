"""Desktop session detection and frontmost-application probing."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from enum import Enum
from typing import Mapping

from ..config import constants
from .models import SourceApp

logger = logging.getLogger(__name__)


class SessionType(Enum):
    MACOS = "macos"
    X11 = "x11"
    WAYLAND = "wayland"
    UNKNOWN = "unknown"


def detect_session(env: Mapping[str, str] | None = None, platform: str | None = None) -> SessionType:
    """Best-effort guess of the current desktop session."""

    env = env if env is not None else os.environ
    platform = platform or sys.platform
    if platform == "darwin":
        return SessionType.MACOS

    session_hint = env.get("XDG_SESSION_TYPE", "").lower()

    if "wayland" in session_hint or env.get("WAYLAND_DISPLAY"):
        return SessionType.WAYLAND

    if "x11" in session_hint or env.get("DISPLAY"):
        return SessionType.X11

    return SessionType.UNKNOWN


class SourceAppProbe:
    """Reports the application that was focused when a capture started."""

    def __init__(self, timeout: float = 1.0) -> None:
        self._timeout = timeout
        self._xdotool = shutil.which("xdotool")

    def probe(self) -> SourceApp:
        unknown = SourceApp(name=constants.UNKNOWN_SOURCE_APP)
        if not self._xdotool:
            return unknown
        try:
            name = self._run("getwindowclassname")
            pid = self._run("getwindowpid")
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("frontmost application probe failed: %s", exc)
            return unknown
        if not name:
            return unknown
        return SourceApp(name=name, app_id=self._process_name(pid))

    def _process_name(self, pid: str) -> str | None:
        if not pid.isdigit():
            return None
        try:
            with open(f"/proc/{pid}/comm", "r", encoding="utf-8") as handle:
                return handle.read().strip() or None
        except OSError:
            return None

    def _run(self, query: str) -> str:
        result = subprocess.run(
            [self._xdotool, "getactivewindow", query],
            check=True,
            capture_output=True,
            text=True,
            timeout=self._timeout,
        )
        return result.stdout.strip()
