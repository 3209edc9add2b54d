from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from scanlens.capture.models import ContentType, ScanRecord, format_age

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def _record(content: str = "text", content_type: ContentType = ContentType.TEXT) -> ScanRecord:
    return ScanRecord(
        id="0123abcd",
        title="title",
        timestamp=NOW,
        content=content,
        source_app="Preview",
        source_app_id="preview",
        image_ref="/tmp/scan_1.png",
        content_type=content_type,
    )


class FormatAgeTests(unittest.TestCase):
    def test_buckets(self) -> None:
        cases = [
            (timedelta(seconds=5), "just now"),
            (timedelta(minutes=5), "5m ago"),
            (timedelta(hours=3, minutes=59), "3h ago"),
            (timedelta(hours=30), "Yesterday"),
            (timedelta(days=4, hours=2), "4d ago"),
        ]
        for delta, expected in cases:
            with self.subTest(delta=delta):
                self.assertEqual(format_age(NOW - delta, NOW), expected)


class ScanRecordTests(unittest.TestCase):
    def test_icon_and_badge(self) -> None:
        self.assertEqual((ContentType.TEXT.icon, ContentType.TEXT.badge), ("viewfinder", ""))
        self.assertEqual((ContentType.QRCODE.icon, ContentType.QRCODE.badge), ("qrcode", "QR"))
        self.assertEqual((ContentType.BARCODE.icon, ContentType.BARCODE.badge), ("barcode", "BC"))

    def test_has_link(self) -> None:
        self.assertTrue(_record("see http://example.com").has_link)
        self.assertTrue(_record("WIFI:S:home;;", ContentType.QRCODE).has_link)
        self.assertFalse(_record("4006381333931", ContentType.BARCODE).has_link)
        self.assertFalse(_record("plain words").has_link)

    def test_dict_form_uses_wire_names(self) -> None:
        data = _record(content_type=ContentType.QRCODE).to_dict()
        self.assertEqual(data["content_type"], "qrcode")
        self.assertEqual(data["timestamp"], "2024-05-10T12:00:00+00:00")
        self.assertEqual(ScanRecord.from_dict(data), _record(content_type=ContentType.QRCODE))

    def test_from_dict_defaults(self) -> None:
        record = ScanRecord.from_dict(
            {
                "id": "x",
                "title": "t",
                "timestamp": "2024-05-10T12:00:00",
                "content": "c",
                "source_app": "Screen",
            }
        )
        self.assertEqual(record.timestamp.tzinfo, timezone.utc)
        self.assertEqual(record.content_type, ContentType.TEXT)
        self.assertIsNone(record.image_ref)

    def test_from_dict_requires_core_fields(self) -> None:
        with self.assertRaises(KeyError):
            ScanRecord.from_dict({"id": "x"})


if __name__ == "__main__":
    unittest.main()
