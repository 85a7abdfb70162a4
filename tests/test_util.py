"""Tests for macos-apps utilities and models."""

import sys
import unittest

from pydantic import ValidationError

from macos_apps.models import ApplicationRecord, ScanReport
from macos_apps.util.image import DATA_URI_PREFIX, to_data_uri
from macos_apps.util.shell import ShellResult, run


class TestShellUtils(unittest.TestCase):
    """Test shell utilities."""

    def test_run_command_success(self):
        """Test running a successful command."""
        result = run([sys.executable, "-c", "print('/Applications/Safari.app')"])
        self.assertTrue(result.success)
        self.assertTrue(result)
        self.assertEqual(result.out, "/Applications/Safari.app")
        self.assertEqual(result.code, 0)

    def test_run_command_failure(self):
        """Test running a failed command."""
        result = run([sys.executable, "-c", "import sys; sys.stderr.write('bad\\r\\n'); sys.exit(1)"])
        self.assertFalse(result.success)
        self.assertFalse(result)
        self.assertEqual(result.code, 1)
        self.assertEqual(result.err, "bad")

    def test_run_timeout(self):
        with self.assertRaises(TimeoutError):
            run([sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.5)

    def test_run_missing_binary(self):
        with self.assertRaises(FileNotFoundError):
            run(["/usr/bin/definitely-not-a-real-binary"])

    def test_lines(self):
        result = ShellResult(code=0, out="/Applications/A.app\n\n/Applications/B.app", err="")
        self.assertEqual(result.lines(), ["/Applications/A.app", "/Applications/B.app"])


class TestModels(unittest.TestCase):
    """Test data models."""

    def test_record_defaults(self):
        record = ApplicationRecord(name="Safari", path="/Applications/Safari.app", bundle_id="com.apple.Safari")
        self.assertIsNone(record.icon_name)
        self.assertIsNone(record.icon_path)
        self.assertIsNone(record.icon_base64)

    def test_record_is_immutable(self):
        record = ApplicationRecord(name="Safari", path="/Applications/Safari.app", bundle_id="com.apple.Safari")
        with self.assertRaises(ValidationError):
            record.name = "Other"

    def test_empty_name_rejected(self):
        with self.assertRaises(ValidationError):
            ApplicationRecord(name="", path="/Applications/X.app", bundle_id="Unknown")

    def test_image_requires_path(self):
        """An icon image is only valid alongside an icon path."""
        with self.assertRaises(ValidationError):
            ApplicationRecord(
                name="Safari",
                path="/Applications/Safari.app",
                bundle_id="com.apple.Safari",
                icon_base64=to_data_uri(b"png")
            )

    def test_image_must_be_png_data_uri(self):
        with self.assertRaises(ValidationError):
            ApplicationRecord(
                name="Safari",
                path="/Applications/Safari.app",
                bundle_id="com.apple.Safari",
                icon_path="/Applications/Safari.app/Contents/Resources/AppIcon.icns",
                icon_base64="data:image/jpeg;base64,AAAA"
            )

    def test_camel_case_aliases(self):
        record = ApplicationRecord(appName="Safari", appPath="/Applications/Safari.app", bundleId="com.apple.Safari")
        dumped = record.model_dump(by_alias=True)
        self.assertEqual(dumped["appName"], "Safari")
        self.assertIn("appIconBase64", dumped)

    def test_data_uri(self):
        self.assertEqual(to_data_uri(b"\x89PNG"), DATA_URI_PREFIX + "iVBORw==")

    def test_scan_report(self):
        apps = [
            ApplicationRecord(name="Safari", path="/Applications/Safari.app", bundle_id="com.apple.Safari",
                              icon_path="/Applications/Safari.app/Contents/Resources/AppIcon.icns",
                              icon_base64=to_data_uri(b"png")),
            ApplicationRecord(name="Notes", path="/System/Applications/Notes.app", bundle_id="com.apple.Notes"),
        ]
        report = ScanReport.create(apps, search_roots=("/Applications",))

        self.assertEqual(report.summary(), {"total": 2, "with_icon": 1, "with_image": 1})
        self.assertEqual(report.find_by_bundle_id("com.apple.Notes").name, "Notes")
        self.assertIsNone(report.find_by_bundle_id("com.apple.Mail"))
        self.assertEqual([a.name for a in report.find_by_name("NOTE")], ["Notes"])
        self.assertEqual(ScanReport.model_validate_json(report.to_json()), report)


if __name__ == "__main__":
    unittest.main()
