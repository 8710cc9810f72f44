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

import argparse
import glob
import os
import sys

from boostx.build_scripts.build_config import load_build_settings
from boostx.build_scripts.build_state import BUILT_LIBS_FILE, BUILT_PLATFORMS_FILE, UNIT_MARKER_SUFFIX
from boostx.build_scripts.build_utils import remove_path
from boostx.build_scripts.packager import FRAMEWORKS_DIR
from boostx.utils.console import print_error, print_success
from boostx.utils.context.command import CliCommand
from boostx.utils.context.context import CliContext
from boostx.utils.context.namespace import CliNameSpace
from boostx.utils.errors import BoostxError


class Clean(CliCommand):
    def description(self) -> str:
        return """
        Clean boostx build artifacts.

        Removes:
        - frameworks/                   # xcframeworks and headers
        - frameworks.built.*            # build records
        - boost/stage, boost/bin.v2     # staged libraries and b2 objects
        - boost/*-build.success         # per-platform build records

        With --all the unpacked boost/ tree and the downloaded archive are
        removed too.

        Examples:
            boostx clean
            boostx clean --all
            boostx clean --dry-run
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="boostx clean",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            allow_abbrev=False,
            description=self.description(),
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="also remove the boost source tree and archive",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="show what would be cleaned without deleting",
        )
        if argv is None:
            argv = sys.argv[2:]
        return parser.parse_args(argv, namespace=CliNameSpace())

    def clean_targets(self, work_dir, clean_all=False) -> list:
        boost_dir = os.path.join(work_dir, "boost")
        targets = [
            os.path.join(work_dir, FRAMEWORKS_DIR),
            os.path.join(work_dir, BUILT_PLATFORMS_FILE),
            os.path.join(work_dir, BUILT_LIBS_FILE),
        ]
        if clean_all:
            settings = load_build_settings(work_dir)
            targets += [boost_dir, os.path.join(work_dir, settings.archive_file_name)]
        else:
            targets += [os.path.join(boost_dir, "stage"), os.path.join(boost_dir, "bin.v2")]
            targets += sorted(glob.glob(os.path.join(boost_dir, f"*{UNIT_MARKER_SUFFIX}")))
        return [t for t in targets if os.path.lexists(t)]

    def exec(self, context: CliContext, args: CliNameSpace):
        try:
            targets = self.clean_targets(context.work_dir, args.all)
        except BoostxError as e:
            print_error(str(e))
            sys.exit(1)

        if not targets:
            print("Nothing to clean.")
            return
        for target in targets:
            if args.dry_run:
                print(f"would remove {target}")
            else:
                print(f"removing {target}")
                remove_path(target)
        if not args.dry_run:
            print_success(f"cleaned {len(targets)} item(s)")
