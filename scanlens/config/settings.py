"""Settings resolved from the environment with sane defaults."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from . import constants

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_env_str(env_name: str, default: str) -> str:
    raw = os.getenv(env_name)
    if raw is None:
        return default
    return raw


def _get_env_alias(env_names: tuple[str, ...], default: str) -> str:
    for env_name in env_names:
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            return raw
    return default


def _parse_env_bool(env_name: str, default: bool) -> bool:
    raw = os.getenv(env_name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def _parse_env_int(env_name: str, default: int) -> int:
    raw = os.getenv(env_name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_env_float(env_name: str, default: float) -> float:
    raw = os.getenv(env_name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _resolve_data_dir() -> str:
    direct = _get_env_alias(("SCANLENS_DATA_DIR",), "")
    if direct:
        return direct
    xdg = _get_env_alias(("XDG_DATA_HOME",), "")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return str(base / constants.APP_NAME)


def _resolve_capture_tool() -> str:
    tool = _get_env_str("SCANLENS_CAPTURE_TOOL", constants.DEFAULT_CAPTURE_TOOL).strip()
    if tool and tool not in constants.CAPTURE_TOOLS:
        return constants.DEFAULT_CAPTURE_TOOL
    return tool


@dataclass(frozen=True)
class Settings:
    data_dir: str
    history_file: str
    capture_dir: str
    capture_tool: str
    ocr_lang: str
    keep_line_breaks: bool
    auto_copy: bool
    auto_open_links: bool
    recognition_timeout: float | None
    api_host: str
    api_port: int

    @classmethod
    def from_env(cls) -> "Settings":
        data_dir = _resolve_data_dir()
        timeout = _parse_env_float(
            "SCANLENS_RECOGNITION_TIMEOUT", constants.DEFAULT_RECOGNITION_TIMEOUT
        )
        return cls(
            data_dir=data_dir,
            history_file=_get_env_alias(
                ("SCANLENS_HISTORY_FILE",),
                str(Path(data_dir) / constants.HISTORY_FILE_NAME),
            ),
            capture_dir=_get_env_alias(("SCANLENS_CAPTURE_DIR",), tempfile.gettempdir()),
            capture_tool=_resolve_capture_tool(),
            ocr_lang=_get_env_alias(("SCANLENS_OCR_LANG",), constants.DEFAULT_OCR_LANG),
            keep_line_breaks=_parse_env_bool(
                "SCANLENS_KEEP_LINE_BREAKS", constants.DEFAULT_KEEP_LINE_BREAKS
            ),
            auto_copy=_parse_env_bool("SCANLENS_AUTO_COPY", constants.DEFAULT_AUTO_COPY),
            auto_open_links=_parse_env_bool(
                "SCANLENS_AUTO_OPEN_LINKS", constants.DEFAULT_AUTO_OPEN_LINKS
            ),
            recognition_timeout=timeout if timeout > 0 else None,
            api_host=_get_env_str("SCANLENS_API_HOST", constants.DEFAULT_API_HOST),
            api_port=_parse_env_int("SCANLENS_API_PORT", constants.DEFAULT_API_PORT),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


__all__ = ["Settings", "get_settings"]
