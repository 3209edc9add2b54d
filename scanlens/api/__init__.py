"""HTTP API package for ScanLens."""

from .app import create_app, get_app
from .services import ScanService

__all__ = ["create_app", "get_app", "ScanService"]
