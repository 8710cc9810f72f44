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
CocoaPods workspace regeneration.

When the project directory holds a Podfile that references the built
xcframeworks, ``pod install`` is run so the .xcworkspace picks them up.
"""

import shutil
from pathlib import Path

from boostx.utils.cmd.cmd_util import exec_command, format_command
from boostx.utils.console import print_info, print_warning
from boostx.utils.errors import WorkspaceGenerationError

PODFILE = "Podfile"
ICU_POD = "icu4c-iosx"


class CocoaPodsWorkspace:
    """Handle the CocoaPods side of a boostx project directory."""

    def __init__(self, project_dir):
        """
        Args:
            project_dir: directory that may contain a Podfile
        """
        self.project_dir = Path(project_dir)

    @property
    def podfile(self) -> Path:
        return self.project_dir / PODFILE

    @property
    def icu_pod_dir(self) -> Path:
        return self.project_dir / "Pods" / ICU_POD

    def has_podfile(self) -> bool:
        return self.podfile.is_file()

    def remove_icu_pod(self) -> bool:
        """Delete Pods/icu4c-iosx so the next pod install rebuilds ICU."""
        if not self.icu_pod_dir.is_dir():
            return False
        shutil.rmtree(self.icu_pod_dir)
        return True

    def _run(self, cmd):
        print(format_command(cmd))
        ret, _ = exec_command(cmd, cwd=str(self.project_dir), capture_output=False)
        return ret

    def generate(self) -> bool:
        """
        Create or update the Xcode workspace.

        Returns:
            bool: False when there is no Podfile (nothing to do)

        Raises:
            WorkspaceGenerationError: pod install failed
        """
        if not self.has_podfile():
            return False

        print("Creating/Updating Xcode workspace via CocoaPods...")
        if self._run(["pod", "repo", "update"]) != 0:
            print_warning("pod repo update failed, continuing with the local spec repos")

        ret = self._run(["pod", "install", "--verbose"])
        if ret != 0:
            raise WorkspaceGenerationError(
                f"pod install failed with status {ret} in {self.project_dir}"
            )
        print_info(".xcworkspace has been created/updated.")
        return True
