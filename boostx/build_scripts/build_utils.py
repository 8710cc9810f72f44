#
# Copyright 2024 boostx Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""
Build utility functions shared by the Boost build steps.

This module wraps the external tools the build drives:
- b2 (Boost.Build) with a generated user-config.jam
- patch, for the instruction-set feature file of Boost.Build
- lipo, to merge per-architecture static libraries
- xcodebuild, to assemble xcframeworks
plus the directory housekeeping around them.
"""

import os
import shutil
from contextlib import contextmanager

from boostx.utils.cmd.cmd_util import exec_command, format_command
from boostx.utils.errors import BuildJobFailure, PackagingError

from .build_plan import BuildJob

INSTRUCTION_SET_FEATURE_JAM = "tools/build/src/tools/features/instruction-set-feature.jam"
USER_CONFIG_JAM = "tools/build/src/user-config.jam"
PRISTINE_SUFFIX = ".orig"


def remove_path(path):
    """Remove a file or a directory tree if it exists."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.remove(path)


def apply_patch(target, patch_file):
    cmd = ["patch", target, patch_file]
    print(format_command(cmd))
    ret, out = exec_command(cmd)
    if ret != 0:
        raise BuildJobFailure(
            os.path.basename(target), f"patch {patch_file} failed:\n{out}"
        )


@contextmanager
def pristine_file(path, patch_file=None):
    """
    Patch a file starting from its original content, and put it back afterwards.

    The first use saves ``<path>.orig``; later uses copy that backup over the
    file before patching, so a patch is never applied twice. The original
    content is restored when the block exits, also on error.
    """
    backup = path + PRISTINE_SUFFIX
    try:
        if not os.path.isfile(backup):
            shutil.copy2(path, backup)
        else:
            shutil.copy2(backup, path)
    except OSError as e:
        raise BuildJobFailure(os.path.basename(path), f"cannot reset {path}: {e.strerror}") from e
    try:
        if patch_file:
            apply_patch(path, patch_file)
        yield path
    finally:
        shutil.copy2(backup, path)


def write_user_config(boost_dir, job: BuildJob):
    path = os.path.join(boost_dir, USER_CONFIG_JAM)
    remove_path(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(job.user_config_jam())
    return path


def run_b2(boost_dir, job: BuildJob, jobs: int):
    """
    Build and stage one unit with b2.

    Raises:
        BuildJobFailure: b2 exited with a non-zero status
    """
    write_user_config(boost_dir, job)
    cmd = job.b2_command(jobs)
    print(format_command(cmd))
    ret, _ = exec_command(cmd, cwd=boost_dir, capture_output=False)
    if ret != 0:
        raise BuildJobFailure(job.unit, f"b2 exited with status {ret}")


def lipo_libs(src_libs, dst_lib):
    """
    Create a universal (fat) static library from per-architecture libraries.

    Example:
        lipo_libs(['stage/iossim-arm64/lib/libboost_atomic.a',
                   'stage/iossim-x86_64/lib/libboost_atomic.a'],
                  'stage/iossim/lib/libboost_atomic.a')
    """
    os.makedirs(os.path.dirname(dst_lib), exist_ok=True)
    cmd = ["lipo", "-create", *src_libs, "-output", dst_lib]
    ret, out = exec_command(cmd)
    if ret != 0:
        print(f"!!!!!!!!!!! lipo_libs {dst_lib} failed, cmd:['{format_command(cmd)}'] !!!!!!!!!!!!!!!")
        raise PackagingError(f"lipo failed for {dst_lib}:\n{out}")
    return dst_lib


def make_xcframework(libraries, dst_framework):
    """
    Create an XCFramework from one static library per platform family.

    Args:
        libraries: static library paths, one per slice
        dst_framework: destination path (.xcframework)

    Note:
        Requires Xcode command-line tools to be installed.
    """
    cmd = ["xcodebuild", "-create-xcframework"]
    for lib in libraries:
        cmd += ["-library", lib]
    cmd += ["-output", dst_framework]
    print(format_command(cmd))
    ret, out = exec_command(cmd)
    if ret != 0:
        print(
            f"!!!!!!!!!!! make_xcframework {dst_framework} failed, cmd:['{format_command(cmd)}'] !!!!!!!!!!!!!!!"
        )
        raise PackagingError(f"xcodebuild failed for {dst_framework}:\n{out}")
    return dst_framework


def copy_headers(boost_dir, frameworks_dir):
    """Copy <boost_dir>/boost to <frameworks_dir>/Headers/boost."""
    dst = os.path.join(frameworks_dir, "Headers", "boost")
    remove_path(dst)
    shutil.copytree(os.path.join(boost_dir, "boost"), dst, symlinks=True)
    return dst
