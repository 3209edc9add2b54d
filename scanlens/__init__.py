"""ScanLens screen capture and recognition runtime."""

__version__ = "0.1.0"
