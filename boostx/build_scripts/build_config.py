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
Build settings for boostx.

Settings come from an optional ``BOOSTX.toml`` in the working directory.
Every key has a default, so a project without the file builds the pinned
Boost release with the stock deployment targets:

    [boost]
    version = "1.87.0"
    sha256 = "af57be25..."
    locations_url = "https://raw.githubusercontent.com/apotocki/boost-iosx/master/LOCATIONS"

    [deployment]
    macosx_arm64 = "12.3"
    ios = "13.4"

    [build]
    cxxstd = "20"
    python_version = "3.11"
    instruction_set_patch = "patches/instruction-set-feature.jam.patch"

String values may reference environment variables as ``${VAR}`` or ``$VAR``.
"""

import os
import re
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Dict

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from boostx.utils.errors import ConfigError

CONFIG_FILE_NAME = "BOOSTX.toml"

DEFAULT_BOOST_VERSION = "1.87.0"
DEFAULT_BOOST_SHA256 = "af57be25cb4c4f4b413ed692fe378affb4352ea50fbe294a11ef548f4d527d89"
DEFAULT_LOCATIONS_URL = "https://raw.githubusercontent.com/apotocki/boost-iosx/master/LOCATIONS"

DEFAULT_DEPLOYMENT_TARGETS = {
    "macosx_arm64": "12.3",
    "macosx_x86_64": "10.13",
    "ios": "13.4",
    "iossim": "13.4",
    "catalyst": "13.4",
    "tvossim": "13.0",
    "watchossim": "11.0",
}


@dataclass(frozen=True)
class BuildSettings:
    """Values that used to be constants at the top of the build script."""
    boost_version: str = DEFAULT_BOOST_VERSION
    boost_sha256: str = DEFAULT_BOOST_SHA256
    locations_url: str = DEFAULT_LOCATIONS_URL
    deployment_targets: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_DEPLOYMENT_TARGETS), hash=False
    )
    cxxstd: str = "20"
    python_version: str = "3.11"
    instruction_set_patch: str = ""

    @property
    def boost_name(self) -> str:
        # 1.87.0 -> boost_1_87_0
        return "boost_" + self.boost_version.replace(".", "_")

    @property
    def archive_file_name(self) -> str:
        return f"{self.boost_name}.tar.bz2"

    def deployment_target(self, key: str) -> str:
        return self.deployment_targets.get(key, DEFAULT_DEPLOYMENT_TARGETS.get(key, ""))


def _expand_env(value: Any) -> Any:
    """Expand ${VAR} and $VAR references, leaving unknown names untouched."""
    if not isinstance(value, str):
        return value

    def repl(match):
        name = match.group(1) or match.group(2)
        return os.environ.get(name, match.group(0))

    return re.sub(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)", repl, value)


def settings_from_dict(config: Dict[str, Any]) -> BuildSettings:
    boost = config.get("boost", {})
    deployment = config.get("deployment", {})
    build = config.get("build", {})

    settings = BuildSettings()
    targets = dict(settings.deployment_targets)
    for key, value in deployment.items():
        targets[key] = str(_expand_env(value))

    return replace(
        settings,
        boost_version=str(_expand_env(boost.get("version", settings.boost_version))),
        boost_sha256=str(_expand_env(boost.get("sha256", settings.boost_sha256))).lower(),
        locations_url=str(_expand_env(boost.get("locations_url", settings.locations_url))),
        deployment_targets=targets,
        cxxstd=str(_expand_env(build.get("cxxstd", settings.cxxstd))),
        python_version=str(_expand_env(build.get("python_version", settings.python_version))),
        instruction_set_patch=str(
            _expand_env(build.get("instruction_set_patch", settings.instruction_set_patch))
        ),
    )


def load_build_settings(project_dir=None) -> BuildSettings:
    """
    Load BOOSTX.toml from project_dir (default: current directory).

    A missing file yields the default settings. A malformed file is an
    error: the caller should not silently build with unexpected values.
    """
    project_dir = project_dir or os.getcwd()
    config_file = os.path.join(project_dir, CONFIG_FILE_NAME)
    if not os.path.isfile(config_file):
        return BuildSettings()

    try:
        with open(config_file, "rb") as f:
            config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse {config_file}: {e}") from e
    return settings_from_dict(config)
