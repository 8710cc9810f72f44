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
Records of previous successful builds.

Two kinds of marker files are kept:

- ``frameworks.built.platforms`` / ``frameworks.built.libs`` in the build
  directory hold the canonical platform and library sets of the last fully
  successful run. A run whose request matches them exactly does nothing.
- ``<platform>-<arch>-build.success`` in the Boost source tree holds the
  libraries staged for one build unit. A unit is reused when it already
  staged every library of the current request.
"""

import os
import re
from typing import FrozenSet, Iterable, Optional

from .options import ResolvedOptions, canonical
from .platforms import BuildUnit

BUILT_PLATFORMS_FILE = "frameworks.built.platforms"
BUILT_LIBS_FILE = "frameworks.built.libs"
UNIT_MARKER_SUFFIX = "-build.success"


def _read(path) -> Optional[str]:
    if not os.path.isfile(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read().strip()


def _write(path, value):
    with open(path, "w", encoding="utf-8") as f:
        f.write(value)


def _remove(path):
    if os.path.isfile(path):
        os.remove(path)


class BuildState:
    def __init__(self, build_dir, boost_dir=None):
        self.build_dir = build_dir
        self.boost_dir = boost_dir or os.path.join(build_dir, "boost")

    @property
    def platforms_file(self):
        return os.path.join(self.build_dir, BUILT_PLATFORMS_FILE)

    @property
    def libs_file(self):
        return os.path.join(self.build_dir, BUILT_LIBS_FILE)

    def unit_marker(self, unit: BuildUnit):
        return os.path.join(self.boost_dir, f"{unit.name}{UNIT_MARKER_SUFFIX}")

    # whole build

    def recorded(self):
        """(platform set, library set) of the last successful run, or None."""
        platforms = _read(self.platforms_file)
        libs = _read(self.libs_file)
        if platforms is None or libs is None:
            return None
        return platforms, libs

    def should_skip_build(self, options: ResolvedOptions) -> bool:
        if options.rebuild:
            return False
        record = self.recorded()
        if record is None:
            return False
        return record == (options.platform_set, options.library_set)

    def invalidate(self):
        _remove(self.platforms_file)
        _remove(self.libs_file)

    def record_success(self, options: ResolvedOptions):
        _write(self.platforms_file, options.platform_set)
        _write(self.libs_file, options.library_set)

    # single build unit

    def built_libraries(self, unit: BuildUnit) -> Optional[FrozenSet[str]]:
        value = _read(self.unit_marker(unit))
        if value is None:
            return None
        return frozenset(x for x in re.split(r"[,\s]+", value) if x)

    def should_skip_platform_build(self, unit: BuildUnit, libraries: Iterable[str], rebuild=False) -> bool:
        if rebuild:
            return False
        built = self.built_libraries(unit)
        if built is None:
            return False
        return built.issuperset(libraries)

    def clear_platform(self, unit: BuildUnit):
        _remove(self.unit_marker(unit))

    def mark_platform_built(self, unit: BuildUnit, libraries: Iterable[str]):
        _write(self.unit_marker(unit), canonical(libraries))
