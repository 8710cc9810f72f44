#!/usr/bin/env python3
"""
Tests for BOOSTX.toml loading.

Run with: python3 -m pytest test_build_config.py
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from boostx.build_scripts.build_config import (
    CONFIG_FILE_NAME,
    DEFAULT_BOOST_SHA256,
    BuildSettings,
    load_build_settings,
)
from boostx.utils.errors import ConfigError


class TestBuildSettings(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, text):
        with open(os.path.join(self.tmp.name, CONFIG_FILE_NAME), "w") as f:
            f.write(text)

    def test_defaults_without_file(self):
        settings = load_build_settings(self.tmp.name)
        self.assertEqual(settings, BuildSettings())
        self.assertEqual(settings.boost_version, "1.87.0")
        self.assertEqual(settings.boost_sha256, DEFAULT_BOOST_SHA256)
        self.assertEqual(settings.boost_name, "boost_1_87_0")
        self.assertEqual(settings.archive_file_name, "boost_1_87_0.tar.bz2")
        self.assertEqual(settings.deployment_target("macosx_x86_64"), "10.13")

    def test_overrides(self):
        """Test that every section of the file is applied."""
        self._write(
            '[boost]\n'
            'version = "1.86.0"\n'
            'sha256 = "ABCDEF"\n'
            '\n'
            '[deployment]\n'
            'ios = "15.0"\n'
            '\n'
            '[build]\n'
            'cxxstd = "17"\n'
            'instruction_set_patch = "patches/isf.patch"\n'
        )
        settings = load_build_settings(self.tmp.name)
        self.assertEqual(settings.boost_name, "boost_1_86_0")
        self.assertEqual(settings.boost_sha256, "abcdef")
        self.assertEqual(settings.deployment_target("ios"), "15.0")
        # untouched keys keep their defaults
        self.assertEqual(settings.deployment_target("iossim"), "13.4")
        self.assertEqual(settings.cxxstd, "17")
        self.assertEqual(settings.instruction_set_patch, "patches/isf.patch")

    def test_environment_expansion(self):
        self._write('[boost]\nlocations_url = "${MIRROR_HOST}/LOCATIONS"\n')
        with patch.dict(os.environ, {"MIRROR_HOST": "https://mirror.example.com"}):
            settings = load_build_settings(self.tmp.name)
        self.assertEqual(settings.locations_url, "https://mirror.example.com/LOCATIONS")

    def test_malformed_file(self):
        self._write("[boost\nversion = 1.87\n")
        with self.assertRaises(ConfigError):
            load_build_settings(self.tmp.name)


if __name__ == "__main__":
    unittest.main()
