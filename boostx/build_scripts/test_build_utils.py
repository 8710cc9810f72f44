#!/usr/bin/env python3
"""
Tests for the external tool wrappers.

Run with: python3 -m pytest test_build_utils.py
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from boostx.build_scripts.build_plan import generate_build_plan
from boostx.build_scripts.build_utils import (
    USER_CONFIG_JAM,
    lipo_libs,
    make_xcframework,
    pristine_file,
    remove_path,
    run_b2,
)
from boostx.build_scripts.options import resolve_options
from boostx.build_scripts.platforms import HostConfig, PlatformCatalog
from boostx.utils.errors import BuildJobFailure, PackagingError

ORIGINAL = "feature.feature instruction-set : : propagated optional ;\n"


class TestPristineFile(unittest.TestCase):
    """Test idempotent patching of the instruction-set feature file."""

    def setUp(self):
        sdk_present = patch.object(PlatformCatalog, "sdk_present", return_value=True)
        sdk_present.start()
        self.addCleanup(sdk_present.stop)
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "instruction-set-feature.jam")
        with open(self.path, "w") as f:
            f.write(ORIGINAL)

    def tearDown(self):
        self.tmp.cleanup()

    def _read(self, path=None):
        with open(path or self.path) as f:
            return f.read()

    def _append(self, text):
        with open(self.path, "a") as f:
            f.write(text)

    def test_first_use_creates_backup(self):
        with pristine_file(self.path):
            pass
        self.assertEqual(self._read(self.path + ".orig"), ORIGINAL)

    def test_changes_never_compound(self):
        """Test that every use starts from the original content."""
        for _ in range(3):
            with pristine_file(self.path):
                self.assertEqual(self._read(), ORIGINAL)
                self._append("patched\n")
        self.assertEqual(self._read(), ORIGINAL)

    def test_stale_file_is_reset_from_backup(self):
        """Test that a file left patched by a killed run is reset."""
        with pristine_file(self.path):
            pass
        self._append("left over\n")
        with pristine_file(self.path):
            self.assertEqual(self._read(), ORIGINAL)

    def test_restored_on_error(self):
        with self.assertRaises(RuntimeError):
            with pristine_file(self.path):
                self._append("patched\n")
                raise RuntimeError("b2 failed")
        self.assertEqual(self._read(), ORIGINAL)

    def test_missing_file(self):
        """Test that a Boost tree without the feature file is a build failure."""
        missing = os.path.join(self.tmp.name, "missing.jam")
        with self.assertRaises(BuildJobFailure) as context:
            with pristine_file(missing):
                self.fail("block must not run")
        self.assertIn("missing.jam", str(context.exception))

    @patch("boostx.build_scripts.build_utils.exec_command", return_value=(0, ""))
    def test_patch_applied(self, mock_exec):
        with pristine_file(self.path, "/patches/feature.patch"):
            pass
        mock_exec.assert_called_once_with(["patch", self.path, "/patches/feature.patch"])

    @patch("boostx.build_scripts.build_utils.exec_command", return_value=(1, "hunk FAILED"))
    def test_failed_patch(self, mock_exec):
        with self.assertRaises(BuildJobFailure):
            with pristine_file(self.path, "/patches/feature.patch"):
                self.fail("block must not run")
        self.assertEqual(self._read(), ORIGINAL)


class TestToolWrappers(unittest.TestCase):
    """Test b2, lipo and xcodebuild invocations."""

    def setUp(self):
        sdk_present = patch.object(PlatformCatalog, "sdk_present", return_value=True)
        sdk_present.start()
        self.addCleanup(sdk_present.stop)
        self.tmp = tempfile.TemporaryDirectory()
        self.boost_dir = self.tmp.name
        os.makedirs(os.path.join(self.boost_dir, "tools", "build", "src"))
        catalog = PlatformCatalog(HostConfig(host_arch="arm64", xcode_root="/Xcode"))
        options = resolve_options(catalog, libs="atomic", platforms="ios")
        self.job = generate_build_plan(options, catalog)[0]

    def tearDown(self):
        self.tmp.cleanup()

    @patch("boostx.build_scripts.build_utils.exec_command", return_value=(0, ""))
    def test_run_b2(self, mock_exec):
        """Test that run_b2 writes user-config.jam and calls b2 in the boost tree."""
        user_config = os.path.join(self.boost_dir, USER_CONFIG_JAM)
        with open(user_config, "w") as f:
            f.write("stale\n")

        run_b2(self.boost_dir, self.job, 6)

        with open(user_config) as f:
            self.assertEqual(f.read(), self.job.user_config_jam())
        mock_exec.assert_called_once_with(self.job.b2_command(6), cwd=self.boost_dir, capture_output=False)

    @patch("boostx.build_scripts.build_utils.exec_command", return_value=(2, ""))
    def test_run_b2_failure(self, mock_exec):
        with self.assertRaises(BuildJobFailure) as context:
            run_b2(self.boost_dir, self.job, 6)
        self.assertIn("ios-arm64", str(context.exception))

    @patch("boostx.build_scripts.build_utils.exec_command", return_value=(0, ""))
    def test_lipo_libs(self, mock_exec):
        dst = os.path.join(self.boost_dir, "stage", "iossim", "lib", "libboost_atomic.a")
        self.assertEqual(lipo_libs(["a.a", "b.a"], dst), dst)
        self.assertTrue(os.path.isdir(os.path.dirname(dst)))
        mock_exec.assert_called_once_with(["lipo", "-create", "a.a", "b.a", "-output", dst])

    @patch("boostx.build_scripts.build_utils.exec_command", return_value=(1, "fatal error"))
    def test_lipo_failure(self, mock_exec):
        with self.assertRaises(PackagingError):
            lipo_libs(["a.a", "b.a"], os.path.join(self.boost_dir, "out", "lib.a"))

    @patch("boostx.build_scripts.build_utils.exec_command", return_value=(0, ""))
    def test_make_xcframework(self, mock_exec):
        make_xcframework(["m.a", "i.a"], "out/boost_atomic.xcframework")
        mock_exec.assert_called_once_with([
            "xcodebuild", "-create-xcframework",
            "-library", "m.a",
            "-library", "i.a",
            "-output", "out/boost_atomic.xcframework",
        ])

    @patch("boostx.build_scripts.build_utils.exec_command", return_value=(70, "error"))
    def test_make_xcframework_failure(self, mock_exec):
        with self.assertRaises(PackagingError):
            make_xcframework(["m.a"], "out/boost_atomic.xcframework")

    def test_remove_path(self):
        d = os.path.join(self.boost_dir, "bin.v2", "x")
        os.makedirs(d)
        f = os.path.join(self.boost_dir, "marker")
        open(f, "w").close()
        remove_path(os.path.join(self.boost_dir, "bin.v2"))
        remove_path(f)
        remove_path(os.path.join(self.boost_dir, "missing"))
        self.assertFalse(os.path.exists(d))
        self.assertFalse(os.path.exists(f))


if __name__ == "__main__":
    unittest.main()
