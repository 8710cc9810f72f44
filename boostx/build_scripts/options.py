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
Resolve the requested Boost libraries and platforms into a build request.

The resolver validates names, expands platform tokens through the
PlatformCatalog and keeps everything as sets; the comma-joined canonical
strings exist only to be compared with, and written to, the build record.
"""

import os
import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Tuple

from boostx.utils.errors import (
    MissingPythonConfig,
    MissingSDK,
    OptionError,
    UnknownLibrary,
)

from .build_config import BuildSettings
from .platforms import BuildUnit, PlatformCatalog

ALL_LIBRARIES = (
    "atomic", "chrono", "container", "context", "contract", "coroutine",
    "date_time", "exception", "fiber", "filesystem", "graph", "iostreams",
    "json", "locale", "log", "math", "nowide", "program_options", "python",
    "random", "regex", "serialization", "stacktrace", "system", "test",
    "thread", "timer", "type_erasure", "wave", "url", "cobalt", "charconv",
)

PYTHON_LIBRARY = "python"

# cobalt needs clang 15 or newer
COBALT_LIBRARY = "cobalt"
COBALT_MIN_CLANG = 15


def split_list(value: Optional[str]) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    if not value:
        return []
    return [x.strip() for x in value.split(",") if x.strip()]


def canonical(items: Iterable[str]) -> str:
    return ",".join(sorted(set(items)))


def default_libraries(clang_major: int) -> List[str]:
    libs = list(ALL_LIBRARIES)
    if clang_major < COBALT_MIN_CLANG:
        libs.remove(COBALT_LIBRARY)
    return libs


@dataclass(frozen=True)
class PythonLink:
    """How b2 finds and links the static Python library."""
    include_dir: str
    library_file: str
    link_name: str
    version: str

    @property
    def library_dir(self) -> str:
        return os.path.dirname(self.library_file) or "."

    @property
    def archive_suffix(self) -> str:
        # 3.11 -> 311, as in libboost_python311.a
        return self.version.replace(".", "")


def python_link_name(library_file: str) -> str:
    """libpython3.11.a -> python3.11"""
    name = os.path.basename(library_file)
    if name.startswith("lib"):
        name = name[len("lib"):]
    if name.endswith(".a"):
        name = name[: -len(".a")]
    return name


def python_version_of(link_name: str, default: str) -> str:
    match = re.search(r"python(\d)\.?(\d+)", link_name)
    if not match:
        return default
    return f"{match.group(1)}.{match.group(2)}"


@dataclass(frozen=True)
class ResolvedOptions:
    libraries: FrozenSet[str]
    units: Tuple[BuildUnit, ...]
    rebuild: bool = False
    rebuild_icu: bool = False
    python: Optional[PythonLink] = None

    @property
    def library_set(self) -> str:
        return canonical(self.libraries)

    @property
    def platform_set(self) -> str:
        return canonical(u.token for u in self.units)

    @property
    def sorted_libraries(self) -> List[str]:
        return sorted(self.libraries)

    def units_of(self, platform: str) -> List[BuildUnit]:
        return [u for u in self.units if u.platform == platform]


def resolve_libraries(libs: Optional[str], clang_major: int) -> FrozenSet[str]:
    requested = default_libraries(clang_major) if libs is None else split_list(libs)
    if not requested:
        raise OptionError("No libraries requested")
    for lib in requested:
        if lib not in ALL_LIBRARIES:
            raise UnknownLibrary(lib)
    return frozenset(requested)


def resolve_platforms(platforms: Optional[str], catalog: PlatformCatalog) -> Tuple[BuildUnit, ...]:
    tokens = catalog.default_tokens() if platforms is None else split_list(platforms)
    if not tokens:
        raise OptionError("No platforms requested")

    units = set()
    for token in tokens:
        units.update(catalog.expand(token))

    for name in sorted({u.platform for u in units}, key=catalog.order_of):
        if not catalog.sdk_present(name):
            raise MissingSDK(name, catalog.sdk_path(name))

    return tuple(sorted(units, key=lambda u: (catalog.order_of(u.platform), u.arch)))


def resolve_python(
    libraries: FrozenSet[str],
    python_include: Optional[str],
    python_lib: Optional[str],
    settings: BuildSettings,
) -> Optional[PythonLink]:
    if PYTHON_LIBRARY not in libraries:
        return None
    missing = []
    if not python_include:
        missing.append("a Python include directory")
    if not python_lib:
        missing.append("a Python static library")
    if missing:
        raise MissingPythonConfig(missing)

    link_name = python_link_name(python_lib)
    return PythonLink(
        include_dir=python_include,
        library_file=python_lib,
        link_name=link_name,
        version=python_version_of(link_name, settings.python_version),
    )


def resolve_options(
    catalog: PlatformCatalog,
    libs: Optional[str] = None,
    platforms: Optional[str] = None,
    python_include: Optional[str] = None,
    python_lib: Optional[str] = None,
    rebuild: bool = False,
    rebuild_icu: bool = False,
) -> ResolvedOptions:
    """
    Validate and expand the command line request.

    Args:
        catalog: platform catalog of this host
        libs: comma-separated Boost libraries, None for the default set
        platforms: comma-separated platform tokens, None for the default set
        python_include: Python headers directory, needed for 'python'
        python_lib: path of libpythonX.Y.a, needed for 'python'
        rebuild: ignore every build record
        rebuild_icu: drop the ICU pod before building

    Raises:
        UnknownLibrary, UnknownPlatform, MissingSDK, MissingPythonConfig
    """
    libraries = resolve_libraries(libs, catalog.host.clang_major)
    units = resolve_platforms(platforms, catalog)
    python = resolve_python(libraries, python_include, python_lib, catalog.settings)
    return ResolvedOptions(
        libraries=libraries,
        units=units,
        rebuild=rebuild,
        rebuild_icu=rebuild_icu,
        python=python,
    )
