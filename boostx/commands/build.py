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
import sys

from boostx.build_scripts.build_boost import BoostBuilder
from boostx.build_scripts.build_config import load_build_settings
from boostx.build_scripts.options import ALL_LIBRARIES, resolve_options
from boostx.build_scripts.platforms import HostConfig, PlatformCatalog
from boostx.utils.console import print_error
from boostx.utils.context.command import CliCommand
from boostx.utils.context.context import CliContext
from boostx.utils.context.namespace import CliNameSpace
from boostx.utils.errors import BoostxError


class Build(CliCommand):
    def description(self) -> str:
        return f"""Build Boost static libraries and xcframeworks for Apple platforms.

LIBRARIES (-l/--libs, default: all, cobalt needs clang 15+):
    {", ".join(ALL_LIBRARIES)}

PLATFORMS (-p/--platforms, default: macosx,ios,iossim,catalyst plus installed
xros, xrossim, tvos, tvossim, watchos and watchossim-both SDKs):
    macosx, catalyst, iossim, xrossim, tvossim, watchossim
        bare name builds the host architecture,
        -arm64 / -x86_64 select one, -both builds the two
    ios, xros, tvos, watchos
        device platforms, arm64 only

EXAMPLES:
    boostx build -l=atomic,filesystem -p=ios
    boostx build --libs=python,filesystem \\
        --python-include /path/to/python/include \\
        --python-lib /path/to/libpython3.11.a
    boostx build -p=macosx-both,iossim-both --rebuild
"""

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="boostx build",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            allow_abbrev=False,
            description=self.description(),
        )
        parser.add_argument(
            "--python-include",
            help="directory with the Python headers (required for 'python')",
        )
        parser.add_argument(
            "--python-lib",
            help="static Python library, e.g. /path/to/libpython3.11.a (required for 'python')",
        )
        parser.add_argument(
            "-l", "--libs",
            help="comma-separated Boost libraries to build",
        )
        parser.add_argument(
            "-p", "--platforms",
            help="comma-separated platforms to build",
        )
        parser.add_argument(
            "--rebuild",
            action="store_true",
            help="clean rebuild, ignore previous build records",
        )
        parser.add_argument(
            "--rebuildicu",
            action="store_true",
            help="remove the icu4c-iosx pod so it is rebuilt",
        )
        if argv is None:
            argv = sys.argv[2:]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        for arg in unknown:
            if arg.startswith("-"):
                print(f"Unknown option {arg}")
                sys.exit(1)
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        try:
            settings = load_build_settings(context.work_dir)
            host = HostConfig.detect()
            options = resolve_options(
                PlatformCatalog(host, settings),
                libs=args.libs,
                platforms=args.platforms,
                python_include=args.python_include,
                python_lib=args.python_lib,
                rebuild=args.rebuild,
                rebuild_icu=args.rebuildicu,
            )
            BoostBuilder(host, settings, build_dir=context.work_dir).build(options)
        except BoostxError as e:
            print_error(str(e))
            sys.exit(1)
