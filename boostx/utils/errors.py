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
Error types raised by boostx.

Every error is fatal for the current run. Commands catch ``BoostxError``,
print the message and exit with a non-zero status.
"""


class BoostxError(Exception):
    """Base class for all boostx failures."""


class OptionError(BoostxError):
    """Invalid command line options."""


class UnknownLibrary(OptionError):
    def __init__(self, library):
        self.library = library
        super().__init__(f"Unknown library '{library}'")


class UnknownPlatform(OptionError):
    def __init__(self, platform):
        self.platform = platform
        super().__init__(f"Unknown platform '{platform}'")


class MissingSDK(OptionError):
    def __init__(self, platform, sdk_path):
        self.platform = platform
        self.sdk_path = sdk_path
        sdk_name = sdk_path.rstrip("/").split("/")[-1]
        super().__init__(
            f"The {platform} is specified as the build platform, "
            f"but {sdk_name} is not found (the path {sdk_path})."
        )


class MissingPythonConfig(OptionError):
    def __init__(self, missing):
        self.missing = missing
        super().__init__(
            f"Building 'python' requires {' and '.join(missing)} "
            "(--python-include and --python-lib must be given together)"
        )


class ConfigError(BoostxError):
    """BOOSTX.toml could not be parsed."""


class DownloadError(BoostxError):
    """No mirror produced an archive with the expected checksum."""


class BuildJobFailure(BoostxError):
    def __init__(self, unit, message):
        self.unit = unit
        super().__init__(f"Build failed for {unit}: {message}")


class PackagingError(BoostxError):
    """lipo or xcodebuild failed while assembling an xcframework."""


class WorkspaceGenerationError(BoostxError):
    """pod install failed."""
