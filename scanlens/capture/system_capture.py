"""Interactive region capture through the platform screenshot helpers."""

from __future__ import annotations

import asyncio
import logging
import shutil
import uuid
from pathlib import Path
from typing import Sequence

from ..config import constants
from .errors import LaunchFailed, UserCancelled
from .imaging import CapturedImage, load_image
from .session import SessionType, detect_session

logger = logging.getLogger(__name__)


class ScreenCapture:
    """Adapter that lets the user pick a screen region and loads the result."""

    def __init__(
        self,
        capture_dir: str | Path,
        *,
        tool: str | None = None,
        session_type: SessionType | None = None,
    ) -> None:
        self._capture_dir = Path(capture_dir)
        self._session_type = session_type or detect_session()
        self._tool = tool or self._select_tool()

    @property
    def tool(self) -> str | None:
        return self._tool

    def _select_tool(self) -> str | None:
        order = ["maim", "gnome-screenshot"]
        if self._session_type == SessionType.WAYLAND:
            order.insert(0, "grim")
        if self._session_type == SessionType.MACOS:
            order.insert(0, "screencapture")
        for name in order:
            if not shutil.which(name):
                continue
            if name == "grim" and not shutil.which("slurp"):
                continue
            return name
        return None

    async def capture(self) -> CapturedImage:
        if self._tool is None:
            raise LaunchFailed(
                "no screen capture helper available; install grim+slurp, maim, or gnome-screenshot"
            )

        path = self._new_capture_path()
        geometry: str | None = None
        if self._tool == "grim":
            geometry = await self._select_region()
            if geometry is None:
                raise UserCancelled("region selection cancelled")

        returncode = await self._run(self._capture_command(path, geometry))
        if not path.exists() or path.stat().st_size == 0:
            logger.debug("%s exited with %s and no image", self._tool, returncode)
            raise UserCancelled("capture cancelled before an image was produced")

        return load_image(path)

    def _new_capture_path(self) -> Path:
        self._capture_dir.mkdir(parents=True, exist_ok=True)
        return self._capture_dir / f"{constants.CAPTURE_FILE_PREFIX}{uuid.uuid4().hex}.png"

    def _capture_command(self, path: Path, geometry: str | None) -> list[str]:
        if self._tool == "screencapture":
            # interactive selection, no sound, no window shadow
            return ["screencapture", "-i", "-x", "-r", str(path)]

        if self._tool == "grim":
            return ["grim", "-g", geometry or "", str(path)]

        if self._tool == "maim":
            return ["maim", "-s", "-u", str(path)]

        return ["gnome-screenshot", "-a", "-f", str(path)]

    async def _select_region(self) -> str | None:
        process = await self._spawn(["slurp"], stdout=asyncio.subprocess.PIPE)
        try:
            stdout, _ = await process.communicate()
        except asyncio.CancelledError:
            _terminate(process)
            raise
        geometry = (stdout or b"").decode("utf-8", errors="replace").strip()
        if process.returncode != 0 or not geometry:
            return None
        return geometry

    async def _run(self, cmd: Sequence[str]) -> int:
        process = await self._spawn(cmd, stdout=asyncio.subprocess.DEVNULL)
        try:
            return await process.wait()
        except asyncio.CancelledError:
            _terminate(process)
            raise

    async def _spawn(self, cmd: Sequence[str], *, stdout: int) -> asyncio.subprocess.Process:
        logger.debug("launching capture helper %s", list(cmd))
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                stdout=stdout,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            raise LaunchFailed(f"unable to start {cmd[0]}: {exc}") from exc


def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
