"""Tests for Info.plist reading and identity extraction."""

import plistlib
import tempfile
import unittest
from pathlib import Path

from macos_apps.collectors.manifest import (
    IconSource,
    extract_manifest_info,
    load_manifest_info,
    read_manifest,
)
from macos_apps.errors import ManifestReadError


class TestNameFallback(unittest.TestCase):
    """Test display name resolution order."""

    def test_display_name_preferred(self):
        """CFBundleDisplayName wins over the other name fields."""
        info = extract_manifest_info({
            "CFBundleDisplayName": "Visual Studio Code",
            "CFBundleName": "Code",
            "CFBundleExecutable": "Electron"
        })
        self.assertEqual(info.name, "Visual Studio Code")

    def test_bundle_name_second(self):
        info = extract_manifest_info({"CFBundleName": "Code", "CFBundleExecutable": "Electron"})
        self.assertEqual(info.name, "Code")

    def test_executable_third(self):
        info = extract_manifest_info({"CFBundleExecutable": "Electron"})
        self.assertEqual(info.name, "Electron")

    def test_unknown_when_no_name_fields(self):
        """Missing all three name fields yields exactly 'Unknown'."""
        info = extract_manifest_info({"CFBundleIdentifier": "com.example.app"})
        self.assertEqual(info.name, "Unknown")

    def test_empty_strings_fall_through(self):
        """Empty names are skipped so the name is never empty."""
        info = extract_manifest_info({"CFBundleDisplayName": "", "CFBundleName": "Notes"})
        self.assertEqual(info.name, "Notes")

    def test_non_string_values_ignored(self):
        info = extract_manifest_info({"CFBundleDisplayName": 42, "CFBundleExecutable": "tool"})
        self.assertEqual(info.name, "tool")


class TestBundleId(unittest.TestCase):
    """Test bundle identifier extraction."""

    def test_bundle_id(self):
        info = extract_manifest_info({"CFBundleIdentifier": "com.apple.Safari"})
        self.assertEqual(info.bundle_id, "com.apple.Safari")

    def test_bundle_id_unknown(self):
        info = extract_manifest_info({})
        self.assertEqual(info.bundle_id, "Unknown")


class TestIconReference(unittest.TestCase):
    """Test icon reference priority across the three manifest shapes."""

    PRIMARY = {"CFBundlePrimaryIcon": {"CFBundleIconFiles": ["AppIcon60x60", "AppIcon76x76"]}}

    def test_icon_file_first(self):
        """CFBundleIconFile wins over nested and symbolic icons."""
        info = extract_manifest_info({
            "CFBundleIconFile": "AppIcon.icns",
            "CFBundleIcons": self.PRIMARY,
            "CFBundleIconName": "AppIconName"
        })
        self.assertEqual(info.icon.source, IconSource.ICON_FILE)
        self.assertEqual(info.icon_name, "AppIcon.icns")

    def test_primary_icon_list_takes_first(self):
        info = extract_manifest_info({"CFBundleIcons": self.PRIMARY, "CFBundleIconName": "AppIconName"})
        self.assertEqual(info.icon.source, IconSource.PRIMARY_ICON)
        self.assertEqual(info.icon_name, "AppIcon60x60")

    def test_primary_icon_single_value(self):
        info = extract_manifest_info({
            "CFBundleIcons": {"CFBundlePrimaryIcon": {"CFBundleIconFiles": "AppIcon"}}
        })
        self.assertEqual(info.icon_name, "AppIcon")

    def test_empty_primary_icon_list_falls_through(self):
        info = extract_manifest_info({
            "CFBundleIcons": {"CFBundlePrimaryIcon": {"CFBundleIconFiles": []}},
            "CFBundleIconName": "AppIcon"
        })
        self.assertEqual(info.icon.source, IconSource.ICON_NAME)
        self.assertEqual(info.icon_name, "AppIcon")

    def test_symbolic_icon_name(self):
        info = extract_manifest_info({"CFBundleIconName": "AppIcon"})
        self.assertEqual(info.icon.source, IconSource.ICON_NAME)

    def test_no_icon(self):
        info = extract_manifest_info({"CFBundleName": "Tool"})
        self.assertIsNone(info.icon)
        self.assertIsNone(info.icon_name)

    def test_malformed_icons_structure_ignored(self):
        info = extract_manifest_info({"CFBundleIcons": ["not", "a", "dict"]})
        self.assertIsNone(info.icon)


class TestReadManifest(unittest.TestCase):
    """Test loading Info.plist files from disk."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_xml_plist(self):
        path = self.dir / "Info.plist"
        with open(path, "wb") as f:
            plistlib.dump({"CFBundleName": "Xml", "CFBundleIdentifier": "com.example.xml"}, f)

        info = load_manifest_info(path)
        self.assertEqual(info.name, "Xml")
        self.assertEqual(info.bundle_id, "com.example.xml")

    def test_binary_plist(self):
        path = self.dir / "Info.plist"
        with open(path, "wb") as f:
            plistlib.dump({"CFBundleName": "Binary"}, f, fmt=plistlib.FMT_BINARY)

        self.assertEqual(load_manifest_info(path).name, "Binary")

    def test_missing_file(self):
        with self.assertRaises(ManifestReadError) as ctx:
            read_manifest(self.dir / "missing.plist")
        self.assertTrue(ctx.exception.manifest_path.endswith("missing.plist"))

    def test_malformed_plist(self):
        path = self.dir / "Info.plist"
        path.write_text("<?xml version='1.0'?><plist><dict><key>Broken")

        with self.assertRaises(ManifestReadError):
            read_manifest(path)

    def test_garbage_plist(self):
        path = self.dir / "Info.plist"
        path.write_bytes(b"\x00\x01not a plist at all")

        with self.assertRaises(ManifestReadError):
            read_manifest(path)

    def test_non_dict_top_level(self):
        path = self.dir / "Info.plist"
        with open(path, "wb") as f:
            plistlib.dump(["a", "b"], f)

        with self.assertRaises(ManifestReadError):
            read_manifest(path)


if __name__ == "__main__":
    unittest.main()
