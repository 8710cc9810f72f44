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
Boost build for Apple platforms.

Runs the whole pipeline for one resolved request:
1. Skip everything when the last successful run built the same request
2. Download, verify, unpack and bootstrap Boost
3. Build every platform/architecture unit with b2 (reusing units whose
   marker already covers the requested libraries)
4. Merge architectures with lipo and create one xcframework per library
5. Record the request and regenerate the CocoaPods workspace

Output:
    - <build_dir>/frameworks/<library>.xcframework
    - <build_dir>/frameworks/Headers/boost
"""

import os
import time
from typing import List, Optional

from boostx.utils.apple.cocoapods import CocoaPodsWorkspace
from boostx.utils.console import print_banner, print_info, print_success
from boostx.utils.fetch.archive import prepare_boost_sources

from .build_config import BuildSettings
from .build_plan import BuildJob, generate_build_plan
from .build_state import BuildState
from .build_utils import INSTRUCTION_SET_FEATURE_JAM, pristine_file, remove_path, run_b2
from .options import ResolvedOptions
from .packager import ArtifactPackager
from .platforms import HostConfig, PlatformCatalog


class BoostBuilder:
    def __init__(
        self,
        host: HostConfig,
        settings: Optional[BuildSettings] = None,
        build_dir=None,
        project_dir=None,
    ):
        """
        Args:
            host: host snapshot taken at startup
            settings: BOOSTX.toml settings
            build_dir: where the archive, the boost tree and frameworks/ live
            project_dir: where the Podfile lives (default: build_dir)
        """
        self.host = host
        self.settings = settings or BuildSettings()
        self.build_dir = os.path.abspath(build_dir or os.getcwd())
        self.project_dir = os.path.abspath(project_dir or self.build_dir)
        self.catalog = PlatformCatalog(host, self.settings)
        self.boost_dir = os.path.join(self.build_dir, "boost")
        self.state = BuildState(self.build_dir, self.boost_dir)
        self.workspace = CocoaPodsWorkspace(self.project_dir)
        self.executed_jobs: List[BuildJob] = []
        self.frameworks: List[str] = []

    def _patch_file(self) -> Optional[str]:
        patch = self.settings.instruction_set_patch
        if not patch:
            return None
        return patch if os.path.isabs(patch) else os.path.join(self.project_dir, patch)

    def run_jobs(self, options: ResolvedOptions, jobs: List[BuildJob]):
        print("patching boost...")
        bin_dir = os.path.join(self.boost_dir, "bin.v2")
        feature_jam = os.path.join(self.boost_dir, INSTRUCTION_SET_FEATURE_JAM)
        patch_file = self._patch_file()
        remove_path(bin_dir)

        for job in jobs:
            if self.state.should_skip_platform_build(job.unit, options.libraries, options.rebuild):
                print(f"{job.unit} already built, skipping")
                continue
            print_banner(f"build {job.unit}")
            self.state.clear_platform(job.unit)
            with pristine_file(feature_jam, patch_file):
                run_b2(self.boost_dir, job, self.host.thread_count)
            remove_path(bin_dir)
            self.state.mark_platform_built(job.unit, options.libraries)
            self.executed_jobs.append(job)

    def build(self, options: ResolvedOptions) -> bool:
        """
        Build, package and install the request.

        Returns:
            bool: True if a build ran, False if the previous build was reused

        Raises:
            BoostxError: any step failed; nothing is recorded in that case
        """
        if options.rebuild:
            self.state.invalidate()
        if options.rebuild_icu and self.workspace.remove_icu_pod():
            print_info(f"removed {self.workspace.icu_pod_dir}")

        if self.state.should_skip_build(options):
            print_info(
                f"boost is already built for [{options.platform_set}] "
                f"with [{options.library_set}], use --rebuild to build again"
            )
            return False
        self.state.invalidate()

        before_time = time.time()
        print_banner(f"build boost {self.settings.boost_version}")
        print_info(f"platforms: {options.platform_set}")
        print_info(f"libraries: {options.library_set}")
        if options.python:
            print_info(f"Python include: {options.python.include_dir}")
            print_info(
                f"Python library: {options.python.library_file} (basename: {options.python.link_name})"
            )

        prepare_boost_sources(self.settings, self.build_dir)

        jobs = generate_build_plan(options, self.catalog)
        packager = ArtifactPackager(self.catalog, self.boost_dir, self.build_dir)
        packager.prepare_family_dirs(options)
        self.run_jobs(options, jobs)
        self.frameworks = packager.package(options)

        self.state.record_success(options)
        self.workspace.generate()

        print(time.strftime("%Y-%m-%d %H:%M:%S", time.localtime()))
        print_banner("Output")
        print(packager.frameworks_dir)
        print(f"use time: {int(time.time() - before_time)} s")
        print_success(f"built {len(self.frameworks)} xcframework(s)")
        return True


def build_boost(options: ResolvedOptions, host: HostConfig, settings=None, build_dir=None, project_dir=None) -> bool:
    return BoostBuilder(host, settings, build_dir, project_dir).build(options)
