#!/usr/bin/env python3
"""
Tests for option resolution.

Run with: python3 -m pytest test_options.py
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from boostx.build_scripts.build_config import BuildSettings
from boostx.build_scripts.options import (
    ALL_LIBRARIES,
    default_libraries,
    python_link_name,
    python_version_of,
    resolve_options,
)
from boostx.build_scripts.platforms import HostConfig, PlatformCatalog
from boostx.utils.errors import (
    MissingPythonConfig,
    MissingSDK,
    OptionError,
    UnknownLibrary,
    UnknownPlatform,
)


class TestResolveOptions(unittest.TestCase):
    """Test library and platform validation."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.host = HostConfig(host_arch="arm64", xcode_root=self.tmp.name, thread_count=8, clang_major=16)
        self.catalog = PlatformCatalog(self.host, BuildSettings())
        for sdk in ["MacOSX", "iPhoneOS", "iPhoneSimulator"]:
            os.makedirs(self.host.sdk_path(sdk))

    def tearDown(self):
        self.tmp.cleanup()

    def test_unknown_library(self):
        """Test that libraries outside the catalog are rejected."""
        for lib in ["boost", "asio", "Atomic", "filesystem2"]:
            with self.assertRaises(UnknownLibrary) as context:
                resolve_options(self.catalog, libs=f"atomic,{lib}", platforms="ios")
            self.assertEqual(context.exception.library, lib)

    def test_library_set_is_order_independent(self):
        """Test canonical library strings."""
        a = resolve_options(self.catalog, libs="filesystem,atomic", platforms="ios")
        b = resolve_options(self.catalog, libs="atomic,filesystem", platforms="ios")
        self.assertEqual(a.library_set, b.library_set)
        self.assertEqual(a.library_set, "atomic,filesystem")

    def test_duplicates_and_blanks_are_dropped(self):
        """Test that 'atomic,,atomic,' is the single library atomic."""
        options = resolve_options(self.catalog, libs="atomic,,atomic,", platforms="ios,")
        self.assertEqual(options.library_set, "atomic")
        self.assertEqual(options.platform_set, "ios")

    def test_empty_library_list(self):
        """Test that an explicitly empty list is an error."""
        with self.assertRaises(OptionError):
            resolve_options(self.catalog, libs="", platforms="ios")

    def test_platform_set_is_order_independent(self):
        """Test canonical platform strings and build order."""
        a = resolve_options(self.catalog, libs="atomic", platforms="ios,macosx-both")
        b = resolve_options(self.catalog, libs="atomic", platforms="macosx-x86_64,ios,macosx-arm64")
        self.assertEqual(a.platform_set, b.platform_set)
        self.assertEqual(a.platform_set, "ios,macosx-arm64,macosx-x86_64")
        self.assertEqual([u.name for u in a.units], ["macosx-arm64", "macosx-x86_64", "ios-arm64"])

    def test_unknown_platform(self):
        """Test that unknown platform tokens are rejected."""
        with self.assertRaises(UnknownPlatform):
            resolve_options(self.catalog, libs="atomic", platforms="ios,android")

    def test_missing_sdk(self):
        """Test that a requested platform without its SDK fails."""
        with self.assertRaises(MissingSDK) as context:
            resolve_options(self.catalog, libs="atomic", platforms="tvossim-both")
        self.assertEqual(context.exception.platform, "tvossim")
        self.assertIn("AppleTVSimulator.sdk", str(context.exception))

        os.makedirs(self.host.sdk_path("AppleTVSimulator"))
        options = resolve_options(self.catalog, libs="atomic", platforms="tvossim-both")
        self.assertEqual(options.platform_set, "tvossim-arm64,tvossim-x86_64")

    def test_missing_base_sdk(self):
        catalog = PlatformCatalog(HostConfig(host_arch="arm64", xcode_root=os.path.join(self.tmp.name, "none")))
        with self.assertRaises(MissingSDK) as context:
            resolve_options(catalog, libs="atomic", platforms="macosx,ios")
        self.assertEqual(context.exception.platform, "macosx")

    def test_default_platforms(self):
        """Test the default platform set on an arm64 host."""
        options = resolve_options(self.catalog, libs="atomic")
        self.assertEqual(options.platform_set, "catalyst-arm64,ios,iossim-arm64,macosx-arm64")

    def test_default_libraries_depend_on_clang(self):
        """Test that cobalt is only a default with clang 15+."""
        self.assertNotIn("cobalt", default_libraries(14))
        self.assertIn("cobalt", default_libraries(15))
        self.assertEqual(len(default_libraries(16)), len(ALL_LIBRARIES))

        old = PlatformCatalog(HostConfig(host_arch="arm64", xcode_root=self.tmp.name, clang_major=14))
        options = resolve_options(old, platforms="ios", python_include="/py/include", python_lib="/py/libpython3.11.a")
        self.assertNotIn("cobalt", options.libraries)
        # still buildable when asked for explicitly
        options = resolve_options(old, libs="cobalt", platforms="ios")
        self.assertEqual(options.library_set, "cobalt")

    def test_rebuild_flags_are_kept(self):
        options = resolve_options(self.catalog, libs="atomic", platforms="ios", rebuild=True, rebuild_icu=True)
        self.assertTrue(options.rebuild)
        self.assertTrue(options.rebuild_icu)


class TestPythonOptions(unittest.TestCase):
    """Test Boost.Python link settings."""

    def setUp(self):
        self.catalog = PlatformCatalog(HostConfig(host_arch="arm64", xcode_root="/nonexistent"))
        sdk_present = patch.object(PlatformCatalog, "sdk_present", return_value=True)
        sdk_present.start()
        self.addCleanup(sdk_present.stop)

    def test_python_requires_both_paths(self):
        """Test that python needs include dir and library together."""
        cases = [
            {},
            {"python_include": "/py/include"},
            {"python_lib": "/py/lib/libpython3.11.a"},
        ]
        for kwargs in cases:
            with self.assertRaises(MissingPythonConfig, msg=str(kwargs)):
                resolve_options(self.catalog, libs="python,atomic", platforms="ios", **kwargs)

    def test_python_link_metadata(self):
        """Test the link name derived from the library file name."""
        options = resolve_options(
            self.catalog,
            libs="python",
            platforms="ios",
            python_include="/py/include",
            python_lib="/py/lib/libpython3.11.a",
        )
        self.assertEqual(options.python.link_name, "python3.11")
        self.assertEqual(options.python.version, "3.11")
        self.assertEqual(options.python.library_dir, "/py/lib")
        self.assertEqual(options.python.archive_suffix, "311")

    def test_python_paths_ignored_without_python(self):
        options = resolve_options(
            self.catalog, libs="atomic", platforms="ios", python_include="/py/include"
        )
        self.assertIsNone(options.python)

    def test_python_version_fallback(self):
        """Test the configured version when the name has none."""
        catalog = PlatformCatalog(
            HostConfig(host_arch="arm64", xcode_root="/nonexistent"),
            BuildSettings(python_version="3.12"),
        )
        options = resolve_options(
            catalog, libs="python", platforms="ios", python_include="/i", python_lib="libpython.a"
        )
        self.assertEqual(options.python.link_name, "python")
        self.assertEqual(options.python.version, "3.12")

    def test_link_name(self):
        self.assertEqual(python_link_name("/x/libpython3.11.a"), "python3.11")
        self.assertEqual(python_link_name("python3.12.a"), "python3.12")
        self.assertEqual(python_link_name("libpython3.13t"), "python3.13t")

    def test_version_of_link_name(self):
        """Test the Python version written to user-config.jam."""
        self.assertEqual(python_version_of("python3.11", "3.9"), "3.11")
        self.assertEqual(python_version_of("python311", "3.9"), "3.11")
        self.assertEqual(python_version_of("python3.13t", "3.9"), "3.13")
        self.assertEqual(python_version_of("python", "3.9"), "3.9")


if __name__ == "__main__":
    unittest.main()
