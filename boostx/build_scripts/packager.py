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
Package staged Boost libraries as xcframeworks.

For every platform family the per-architecture archives from
``stage/<platform>-<arch>/lib`` are merged with lipo into
``stage/<platform>/lib`` when two architectures were built; a single
architecture is used as is. Each physical library then becomes
``<frameworks>/<name>.xcframework`` with one slice per family.
"""

import os
from typing import List

from .build_utils import copy_headers, lipo_libs, make_xcframework, remove_path
from .options import PYTHON_LIBRARY, ResolvedOptions
from .platforms import PlatformCatalog

# Boost components that produce more than one archive
META_LIBRARIES = {
    "math": [
        "boost_math_c99", "boost_math_c99l", "boost_math_c99f",
        "boost_math_tr1", "boost_math_tr1l", "boost_math_tr1f",
    ],
    "log": ["boost_log", "boost_log_setup"],
    "stacktrace": ["boost_stacktrace_basic", "boost_stacktrace_noop"],
    "serialization": ["boost_serialization", "boost_wserialization"],
    "test": ["boost_prg_exec_monitor", "boost_test_exec_monitor", "boost_unit_test_framework"],
}

FRAMEWORKS_DIR = "frameworks"


def physical_libraries(options: ResolvedOptions) -> List[str]:
    names = []
    for lib in options.sorted_libraries:
        if lib in META_LIBRARIES:
            names.extend(META_LIBRARIES[lib])
        elif lib == PYTHON_LIBRARY and options.python:
            names.append(f"boost_python{options.python.archive_suffix}")
        else:
            names.append(f"boost_{lib}")
    return names


class ArtifactPackager:
    def __init__(self, catalog: PlatformCatalog, boost_dir, build_dir):
        self.catalog = catalog
        self.boost_dir = boost_dir
        self.build_dir = build_dir

    @property
    def frameworks_dir(self):
        return os.path.join(self.build_dir, FRAMEWORKS_DIR)

    def _stage_lib(self, stage, name):
        return os.path.join(self.boost_dir, "stage", stage, "lib", f"lib{name}.a")

    def prepare_family_dirs(self, options: ResolvedOptions):
        """Reset stage/<platform>/lib of every multi-arch family."""
        for platform in self.catalog.platforms:
            if not platform.has_arch_variants:
                continue
            lib_dir = os.path.join(self.boost_dir, "stage", platform.name, "lib")
            remove_path(lib_dir)
            if options.units_of(platform.name):
                os.makedirs(lib_dir, exist_ok=True)

    def family_library(self, options: ResolvedOptions, platform_name, name):
        """
        The archive of one library for one platform family.

        Returns None when the family was not built.
        """
        units = options.units_of(platform_name)
        if not units:
            return None
        if len(units) == 1:
            return self._stage_lib(units[0].name, name)
        return lipo_libs(
            [self._stage_lib(u.name, name) for u in units],
            self._stage_lib(platform_name, name),
        )

    def package_library(self, options: ResolvedOptions, name):
        libraries = []
        for platform in self.catalog.platforms:
            lib = self.family_library(options, platform.name, name)
            if lib:
                libraries.append(lib)
        dst = os.path.join(self.frameworks_dir, f"{name}.xcframework")
        return make_xcframework(libraries, dst)

    def package(self, options: ResolvedOptions) -> List[str]:
        print("installing boost...")
        remove_path(self.frameworks_dir)
        os.makedirs(self.frameworks_dir)

        frameworks = [self.package_library(options, name) for name in physical_libraries(options)]
        copy_headers(self.boost_dir, self.frameworks_dir)
        return frameworks
