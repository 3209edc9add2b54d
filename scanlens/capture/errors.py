"""Exception hierarchy for capture, recognition and system helpers."""

from __future__ import annotations


class ScanLensError(RuntimeError):
    pass


class CaptureError(ScanLensError):
    pass


class UserCancelled(CaptureError):
    """The capture tool exited without producing an image."""


class InvalidImageData(CaptureError):
    """The capture tool produced a file that is not a decodable image."""


class LaunchFailed(CaptureError):
    """The capture tool could not be started."""


class RecognitionError(ScanLensError):
    pass


class RecognizerUnavailable(RecognitionError):
    pass


class ClipboardUnavailable(ScanLensError):
    pass


class SpeechUnavailable(ScanLensError):
    pass
