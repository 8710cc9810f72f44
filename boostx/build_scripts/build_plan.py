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
Turn a resolved request into b2 invocations.

One BuildJob is produced per build unit, in catalog order. A job carries
everything needed to write ``user-config.jam`` and call ``./b2``; it does
not run anything itself.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .build_config import BuildSettings
from .options import PythonLink, ResolvedOptions
from .platforms import ARCH_ARM64, ARCH_X86_64, BuildUnit, PlatformCatalog


def boost_arc(arch: str) -> str:
    if arch.startswith("arm"):
        return "arm"
    if arch.startswith("x86"):
        return "x86"
    return "unknown"


def boost_abi(arch: str) -> str:
    if arch == ARCH_ARM64:
        return "aapcs"
    if arch == ARCH_X86_64:
        return "sysv"
    return "unknown"


def common_b2_options(settings: BuildSettings) -> List[str]:
    return [
        "address-model=64",
        "release",
        "link=static",
        "runtime-link=shared",
        "define=BOOST_SPIRIT_THREADSAFE",
        f"cxxflags=-std=c++{settings.cxxstd}",
    ]


def python_b2_options(python: PythonLink) -> List[str]:
    return [
        "define=BOOST_PYTHON_STATIC_LIB",
        "define=Py_NO_ENABLE_SHARED",
        f"cxxflags=-I{python.include_dir}",
        f"linkflags=-L{python.library_dir} -l{python.link_name}",
    ]


@dataclass(frozen=True)
class BuildJob:
    unit: BuildUnit
    compiler_flags: str
    root: str
    b2_config: str = ""
    b2_flags: Tuple[str, ...] = ()
    b2_options: Tuple[str, ...] = ()
    library_flags: Tuple[str, ...] = ()
    python: Optional[PythonLink] = None

    @property
    def stage_dir(self) -> str:
        return f"stage/{self.unit.name}"

    def user_config_jam(self) -> str:
        requirements = f"<architecture>{boost_arc(self.unit.arch)}"
        if self.b2_config:
            requirements += f" {self.b2_config}"
        text = (
            f"using darwin : {self.unit.platform} : clang++ -arch {self.unit.arch} {self.compiler_flags}\n"
            f"    : <striper> <root>{self.root}\n"
            f"    : {requirements}\n"
            "    ;\n"
        )
        if self.python:
            text += (
                f"using python : {self.python.version} : /usr/bin/env"
                f" : {self.python.include_dir} : {self.python.library_dir} ;\n"
            )
        return text

    def b2_command(self, jobs: int) -> List[str]:
        return [
            "./b2",
            f"-j{jobs}",
            f"--stagedir={self.stage_dir}",
            f"toolset=darwin-{self.unit.platform}",
            f"abi={boost_abi(self.unit.arch)}",
            *self.b2_flags,
            *self.b2_options,
            *self.library_flags,
        ]


def generate_build_plan(options: ResolvedOptions, catalog: PlatformCatalog) -> List[BuildJob]:
    b2_options = common_b2_options(catalog.settings)
    if options.python:
        b2_options += python_b2_options(options.python)
    library_flags = tuple(f"--with-{lib}" for lib in options.sorted_libraries)

    jobs = []
    for unit in options.units:
        platform = catalog.get(unit.platform)
        jobs.append(
            BuildJob(
                unit=unit,
                compiler_flags=catalog.compiler_flags(unit),
                root=catalog.developer_root(unit.platform),
                b2_config=platform.b2_config,
                b2_flags=tuple(platform.b2_flags.split()),
                b2_options=tuple(b2_options),
                library_flags=library_flags,
                python=options.python,
            )
        )
    return jobs
