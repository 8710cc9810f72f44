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
import importlib
import os
import sys

from boostx import __version__
from boostx.utils.context.command import CliCommand
from boostx.utils.context.context import CliContext
from boostx.utils.context.namespace import CliNameSpace

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """boostx - Boost for Apple platforms

Downloads Boost, builds the requested libraries for macOS, Mac Catalyst,
iOS, visionOS, tvOS and watchOS (devices and simulators) and packages
them as xcframeworks.

USAGE:
    boostx <command> [options]

COMMANDS:
    build       Build Boost libraries and xcframeworks
    clean       Clean build artifacts

For more information on a specific command:
    boostx <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if command.startswith("_") or command.startswith("test_"):
                continue
            if command.endswith(".py"):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def _parser(self, add_help=True) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="boostx",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=add_help,
        )
        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}",
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            nargs="?",
            choices=self.get_command_list(),
        )
        return parser

    def cli(self, argv=None) -> CliNameSpace:
        argv = sys.argv[1:] if argv is None else argv
        # only "boostx --help" shows this help, "boostx build --help" belongs to build
        if argv[:1] in (["--help"], ["-h"]):
            self._parser().print_help()
            sys.exit(0)

        args, unknown = self._parser(add_help=False).parse_known_args(argv[:1], namespace=CliNameSpace())
        args.command_argv = argv[1:]
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if not args.subcommand:
            print("ERROR: No command specified\n")
            self._parser().print_help()
            sys.exit(1)

        module = importlib.import_module(f"boostx.commands.{args.subcommand}")
        klass = getattr(module, args.subcommand.capitalize())
        sub_cmd = klass()
        sub_cmd.exec(context, sub_cmd.cli(args.command_argv))


def main():
    cmd = Cli()
    cmd.exec(CliContext(), cmd.cli())


if __name__ == "__main__":
    main()
