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
Apple platform catalog.

Knows every platform boostx can build for, which architectures each one
has, where its SDK lives inside Xcode and which compiler flags select it.
Platform tokens given on the command line are expanded here into concrete
build units:

    macosx          -> macosx-<host arch>
    macosx-both     -> macosx-arm64, macosx-x86_64
    iossim-x86_64   -> iossim-x86_64
    ios             -> ios (device platforms are arm64 only)
"""

import os
import platform as host_platform
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from boostx.utils.cmd.cmd_util import exec_command
from boostx.utils.errors import UnknownPlatform

from .build_config import BuildSettings

ARCH_ARM64 = "arm64"
ARCH_X86_64 = "x86_64"
ALL_ARCHS = (ARCH_ARM64, ARCH_X86_64)

# Suffix that selects every architecture of a platform
BOTH_SUFFIX = "both"

DEFAULT_XCODE_ROOT = "/Applications/Xcode.app/Contents/Developer"


def normalize_arch(machine: str) -> str:
    machine = machine.strip().lower()
    if machine in ("arm64", "aarch64"):
        return ARCH_ARM64
    if machine in ("x86_64", "amd64"):
        return ARCH_X86_64
    return machine


@dataclass(frozen=True)
class HostConfig:
    """
    Snapshot of the build host, taken once at startup.

    Everything the build needs to know about the machine lives here so the
    rest of the code never reads the environment directly.
    """
    host_arch: str
    xcode_root: str
    thread_count: int = 1
    clang_major: int = 0

    @classmethod
    def detect(cls) -> "HostConfig":
        code, out = exec_command(["xcode-select", "-print-path"])
        xcode_root = out.strip() if code == 0 and out.strip() else DEFAULT_XCODE_ROOT

        clang_major = 0
        code, out = exec_command(["clang++", "--version"])
        if code == 0:
            match = re.search(r"version (\d+)", out.splitlines()[0] if out else "")
            if match:
                clang_major = int(match.group(1))

        return cls(
            host_arch=normalize_arch(host_platform.machine()),
            xcode_root=xcode_root,
            thread_count=os.cpu_count() or 1,
            clang_major=clang_major,
        )

    def developer_root(self, sdk: str) -> str:
        """e.g. iPhoneOS -> <xcode>/Platforms/iPhoneOS.platform/Developer"""
        return os.path.join(self.xcode_root, "Platforms", f"{sdk}.platform", "Developer")

    def sdk_path(self, sdk: str) -> str:
        return os.path.join(self.developer_root(sdk), "SDKs", f"{sdk}.sdk")


@dataclass(frozen=True)
class BuildUnit:
    """One (platform, architecture) pair: the unit b2 is invoked for."""
    platform: str
    arch: str
    has_arch_variants: bool = field(default=True, compare=False)

    @property
    def name(self) -> str:
        return f"{self.platform}-{self.arch}"

    @property
    def token(self) -> str:
        # device platforms are spelled without an arch on the command line
        return self.name if self.has_arch_variants else self.platform

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Platform:
    name: str
    sdk: str
    archs: Tuple[str, ...]
    # clang flags; {arch}, {sdk_path}, {root} and {version} are substituted
    flags: str
    # deployment target setting key per arch, see BuildSettings
    version_keys: Tuple[Tuple[str, str], ...] = ()
    b2_config: str = ""
    b2_flags: str = ""

    @property
    def has_arch_variants(self) -> bool:
        return len(self.archs) > 1

    def version_key(self, arch: str) -> Optional[str]:
        return dict(self.version_keys).get(arch)

    def units(self, archs) -> List[BuildUnit]:
        return [BuildUnit(self.name, a, self.has_arch_variants) for a in archs]


_IPHONE_CONFIG = "<target-os>iphone"
_SIM_B2_FLAGS = "target-os=iphone define=BOOST_TEST_NO_MAIN"
_DEVICE_B2_FLAGS = "binary-format=mach-o target-os=iphone define=_LITTLE_ENDIAN define=BOOST_TEST_NO_MAIN"
_NO_ALT_STACK = " define=BOOST_TEST_DISABLE_ALT_STACK"

_CATALYST_FLAGS = (
    "--target={arch}-apple-ios{version}-macabi -isysroot {sdk_path}"
    " -I{sdk_path}/System/iOSSupport/usr/include/"
    " -isystem {sdk_path}/System/iOSSupport/usr/include"
    " -iframework {sdk_path}/System/iOSSupport/System/Library/Frameworks"
)

# Order matters: it is the build order and the xcframework slice order.
PLATFORMS = (
    Platform(
        "macosx", "MacOSX", ALL_ARCHS,
        "-mmacosx-version-min={version} -isysroot {sdk_path}",
        version_keys=((ARCH_ARM64, "macosx_arm64"), (ARCH_X86_64, "macosx_x86_64")),
    ),
    Platform(
        "catalyst", "MacOSX", ALL_ARCHS, _CATALYST_FLAGS,
        version_keys=((ARCH_ARM64, "catalyst"), (ARCH_X86_64, "catalyst")),
    ),
    Platform(
        "iossim", "iPhoneSimulator", ALL_ARCHS,
        "-mios-simulator-version-min={version} -isysroot {sdk_path}",
        version_keys=((ARCH_ARM64, "iossim"), (ARCH_X86_64, "iossim")),
        b2_config=_IPHONE_CONFIG, b2_flags=_SIM_B2_FLAGS,
    ),
    Platform(
        "xrossim", "XRSimulator", ALL_ARCHS, "-isysroot {sdk_path}",
        b2_config=_IPHONE_CONFIG, b2_flags=_SIM_B2_FLAGS,
    ),
    Platform(
        "tvossim", "AppleTVSimulator", ALL_ARCHS,
        "--target={arch}-apple-tvos{version}-simulator -isysroot {sdk_path}",
        version_keys=((ARCH_ARM64, "tvossim"), (ARCH_X86_64, "tvossim")),
        b2_config=_IPHONE_CONFIG, b2_flags=_SIM_B2_FLAGS + _NO_ALT_STACK,
    ),
    Platform(
        "watchossim", "WatchSimulator", ALL_ARCHS,
        "--target={arch}-apple-watchos{version}-simulator -isysroot {sdk_path}",
        version_keys=((ARCH_ARM64, "watchossim"), (ARCH_X86_64, "watchossim")),
        b2_config=_IPHONE_CONFIG, b2_flags=_SIM_B2_FLAGS + _NO_ALT_STACK,
    ),
    Platform(
        "ios", "iPhoneOS", (ARCH_ARM64,),
        "-isysroot {sdk_path} -mios-version-min={version}",
        version_keys=((ARCH_ARM64, "ios"),),
        b2_config=_IPHONE_CONFIG, b2_flags=_DEVICE_B2_FLAGS,
    ),
    Platform(
        "xros", "XROS", (ARCH_ARM64,), "-isysroot {sdk_path}",
        b2_config=_IPHONE_CONFIG, b2_flags=_DEVICE_B2_FLAGS,
    ),
    Platform(
        "tvos", "AppleTVOS", (ARCH_ARM64,), "-isysroot {sdk_path}",
        b2_config=_IPHONE_CONFIG, b2_flags=_DEVICE_B2_FLAGS + _NO_ALT_STACK,
    ),
    Platform(
        "watchos", "WatchOS", (ARCH_ARM64,), "-isysroot {sdk_path}",
        b2_config=_IPHONE_CONFIG, b2_flags=_DEVICE_B2_FLAGS + _NO_ALT_STACK,
    ),
)

# Platforms always built when -p is not given
BASE_PLATFORMS = ("macosx", "ios", "iossim", "catalyst")

# Extra default tokens, added when the SDK of the platform is installed
OPTIONAL_DEFAULT_TOKENS = (
    ("xros", "xros"),
    ("xrossim", "xrossim"),
    ("tvos", "tvos"),
    ("tvossim", "tvossim"),
    ("watchos", "watchos"),
    ("watchossim", "watchossim-both"),
)


class PlatformCatalog:
    """Read-only queries over PLATFORMS for one host."""

    def __init__(self, host: HostConfig, settings: Optional[BuildSettings] = None):
        self.host = host
        self.settings = settings or BuildSettings()
        self._platforms: Dict[str, Platform] = {p.name: p for p in PLATFORMS}

    @property
    def platforms(self) -> List[Platform]:
        return list(self._platforms.values())

    def get(self, name: str) -> Platform:
        try:
            return self._platforms[name]
        except KeyError:
            raise UnknownPlatform(name) from None

    def order_of(self, name: str) -> int:
        return list(self._platforms).index(name)

    def developer_root(self, name: str) -> str:
        return self.host.developer_root(self.get(name).sdk)

    def sdk_path(self, name: str) -> str:
        return self.host.sdk_path(self.get(name).sdk)

    def sdk_present(self, name: str) -> bool:
        # not cached: Xcode may be switched between runs
        return os.path.isdir(self.sdk_path(name))

    def all_tokens(self) -> List[str]:
        tokens = []
        for p in PLATFORMS:
            tokens.append(p.name)
            if p.has_arch_variants:
                tokens.extend(f"{p.name}-{a}" for a in p.archs)
                tokens.append(f"{p.name}-{BOTH_SUFFIX}")
        return tokens

    def expand(self, token: str) -> List[BuildUnit]:
        """Expand one command line token into build units."""
        token = token.strip()
        name, sep, suffix = token.partition("-")
        p = self._platforms.get(name)
        if p is None or (sep and not suffix):
            raise UnknownPlatform(token)

        if not suffix:
            if not p.has_arch_variants:
                return p.units(p.archs)
            if self.host.host_arch not in p.archs:
                raise UnknownPlatform(f"{token}-{self.host.host_arch}")
            return p.units([self.host.host_arch])

        if not p.has_arch_variants:
            raise UnknownPlatform(token)
        if suffix == BOTH_SUFFIX:
            return p.units(p.archs)
        if suffix in p.archs:
            return p.units([suffix])
        raise UnknownPlatform(token)

    def default_tokens(self) -> List[str]:
        tokens = list(BASE_PLATFORMS)
        for name, token in OPTIONAL_DEFAULT_TOKENS:
            if self.sdk_present(name):
                tokens.append(token)
        return tokens

    def compiler_flags(self, unit: BuildUnit) -> str:
        p = self.get(unit.platform)
        key = p.version_key(unit.arch)
        version = self.settings.deployment_target(key) if key else ""
        return p.flags.format(
            arch=unit.arch,
            sdk_path=self.sdk_path(p.name),
            root=self.developer_root(p.name),
            version=version,
        )
