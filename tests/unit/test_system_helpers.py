"""Unit tests for clipboard, speech and session helpers."""

from __future__ import annotations

import subprocess
import unittest
from datetime import datetime, timezone
from unittest import mock

from scanlens.capture.actions import copy_record, open_first_link, open_record_link, speak_record
from scanlens.capture.errors import ClipboardUnavailable, SpeechUnavailable
from scanlens.capture.models import ContentType, ScanRecord, SourceApp
from scanlens.capture.session import SessionType, SourceAppProbe, detect_session
from scanlens.capture.speech import SystemSpeaker
from scanlens.capture.system_clipboard import SystemClipboard


def _which(*available: str):
    return lambda name: f"/usr/bin/{name}" if name in available else None


def _record(content: str, content_type: ContentType = ContentType.TEXT) -> ScanRecord:
    return ScanRecord(
        id="abc",
        title=content[:30],
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        content=content,
        source_app="Terminal",
        content_type=content_type,
    )


class SystemClipboardTests(unittest.TestCase):
    def test_prefers_wl_copy(self) -> None:
        with mock.patch("scanlens.capture.system_clipboard.shutil.which", side_effect=_which("wl-copy", "xclip")):
            clipboard = SystemClipboard()
        with mock.patch("scanlens.capture.system_clipboard.subprocess.run") as run:
            clipboard.write_text("hello")
        run.assert_called_once_with(["wl-copy"], check=True, input="hello", text=True)

    def test_falls_back_to_xclip(self) -> None:
        with mock.patch("scanlens.capture.system_clipboard.shutil.which", side_effect=_which("xclip")):
            clipboard = SystemClipboard()
        with mock.patch("scanlens.capture.system_clipboard.subprocess.run") as run:
            clipboard.write_text("x")
        self.assertEqual(run.call_args.args[0], ["xclip", "-selection", "clipboard"])

    def test_no_helper_raises(self) -> None:
        with mock.patch("scanlens.capture.system_clipboard.shutil.which", return_value=None):
            with self.assertRaises(ClipboardUnavailable):
                SystemClipboard()

    def test_write_failure_propagates(self) -> None:
        with mock.patch("scanlens.capture.system_clipboard.shutil.which", side_effect=_which("pbcopy")):
            clipboard = SystemClipboard()
        error = subprocess.CalledProcessError(1, ["pbcopy"])
        with mock.patch("scanlens.capture.system_clipboard.subprocess.run", side_effect=error):
            with self.assertRaises(subprocess.CalledProcessError):
                clipboard.write_text("x")


class SystemSpeakerTests(unittest.TestCase):
    def setUp(self) -> None:
        with mock.patch("scanlens.capture.system_clipboard.shutil.which", side_effect=_which("espeak-ng")):
            self.speaker = SystemSpeaker()

    def test_speak_starts_process(self) -> None:
        with mock.patch("scanlens.capture.speech.subprocess.Popen") as popen:
            popen.return_value.poll.return_value = None
            self.assertTrue(self.speaker.speak("hello there"))
            self.assertTrue(self.speaker.is_speaking)
        self.assertEqual(popen.call_args.args[0], ["espeak-ng", "hello there"])

    def test_second_speak_stops_playback(self) -> None:
        with mock.patch("scanlens.capture.speech.subprocess.Popen") as popen:
            process = popen.return_value
            process.poll.return_value = None
            self.speaker.speak("first")
            self.assertFalse(self.speaker.speak("second"))
        process.terminate.assert_called_once_with()
        self.assertEqual(popen.call_count, 1)
        self.assertFalse(self.speaker.is_speaking)

    def test_blank_text_is_not_spoken(self) -> None:
        with mock.patch("scanlens.capture.speech.subprocess.Popen") as popen:
            self.assertFalse(self.speaker.speak("   "))
        popen.assert_not_called()

    def test_no_synthesizer_raises(self) -> None:
        with mock.patch("scanlens.capture.system_clipboard.shutil.which", return_value=None):
            with self.assertRaises(SpeechUnavailable):
                SystemSpeaker()


class SessionTests(unittest.TestCase):
    def test_detect_session(self) -> None:
        self.assertEqual(detect_session({}, platform="darwin"), SessionType.MACOS)
        self.assertEqual(detect_session({"XDG_SESSION_TYPE": "wayland"}, platform="linux"), SessionType.WAYLAND)
        self.assertEqual(detect_session({"WAYLAND_DISPLAY": "wayland-0"}, platform="linux"), SessionType.WAYLAND)
        self.assertEqual(detect_session({"DISPLAY": ":0"}, platform="linux"), SessionType.X11)
        self.assertEqual(detect_session({}, platform="linux"), SessionType.UNKNOWN)

    def test_probe_without_xdotool_is_screen(self) -> None:
        with mock.patch("scanlens.capture.session.shutil.which", return_value=None):
            probe = SourceAppProbe()
        self.assertEqual(probe.probe(), SourceApp("Screen"))

    def test_probe_reads_window_class(self) -> None:
        with mock.patch("scanlens.capture.session.shutil.which", return_value="/usr/bin/xdotool"):
            probe = SourceAppProbe()
        outputs = {
            "getwindowclassname": subprocess.CompletedProcess([], 0, stdout="firefox\n"),
            "getwindowpid": subprocess.CompletedProcess([], 0, stdout="not-a-pid\n"),
        }
        with mock.patch(
            "scanlens.capture.session.subprocess.run",
            side_effect=lambda cmd, **kwargs: outputs[cmd[-1]],
        ):
            self.assertEqual(probe.probe(), SourceApp("firefox", None))

    def test_probe_failure_is_screen(self) -> None:
        with mock.patch("scanlens.capture.session.shutil.which", return_value="/usr/bin/xdotool"):
            probe = SourceAppProbe()
        error = subprocess.CalledProcessError(1, ["xdotool"])
        with mock.patch("scanlens.capture.session.subprocess.run", side_effect=error):
            self.assertEqual(probe.probe(), SourceApp("Screen"))


class ActionTests(unittest.TestCase):
    def test_copy_record_writes_content(self) -> None:
        clipboard = mock.Mock()
        copy_record(_record("payload"), clipboard)
        clipboard.write_text.assert_called_once_with("payload")

    def test_open_first_link_calls_opener_once(self) -> None:
        opened: list[str] = []
        url = open_first_link("a https://example.com b https://other.example", opened.append)
        self.assertEqual(url, "https://example.com")
        self.assertEqual(opened, ["https://example.com"])

    def test_open_record_link_without_link(self) -> None:
        opener = mock.Mock()
        self.assertIsNone(open_record_link(_record("plain text"), opener))
        opener.assert_not_called()

    def test_speak_record_passes_content(self) -> None:
        speaker = mock.Mock()
        speaker.speak.return_value = True
        self.assertTrue(speak_record(_record("read me"), speaker))
        speaker.speak.assert_called_once_with("read me")


if __name__ == "__main__":
    unittest.main()
