"""Shared runtime constants for ScanLens."""

APP_NAME = "scanlens"
HISTORY_FILE_NAME = "scan_history.json"
CAPTURE_FILE_PREFIX = "scan_"

CAPTURE_TOOLS = ["screencapture", "grim", "maim", "gnome-screenshot"]
DEFAULT_CAPTURE_TOOL = ""
DEFAULT_OCR_LANG = "eng"

DEFAULT_KEEP_LINE_BREAKS = True
DEFAULT_AUTO_COPY = False
DEFAULT_AUTO_OPEN_LINKS = False
DEFAULT_RECOGNITION_TIMEOUT = 0.0

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8765

UNKNOWN_SOURCE_APP = "Screen"
MAX_TITLE_LENGTH = 30
