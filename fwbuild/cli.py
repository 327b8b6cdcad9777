#
# Copyright 2024 fwbuild Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

import os
import sys
import importlib
import argparse

from fwbuild.utils.context.namespace import CliNameSpace
from fwbuild.utils.context.context import CliContext
from fwbuild.utils.context.command import CliCommand

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]
DEFAULT_COMMAND = "build"


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """fwbuild - Xcode framework build and packaging tool

Builds every configured scheme with xcodebuild, lipos the per-sdk static
libraries into universal framework binaries and zips the result together
with the license file. Schemes and products are read from FWBUILD.toml in
the current directory.

USAGE:
    fwbuild [command] [options]

COMMANDS:
    build       Build, lipo and zip all frameworks (default)
    check       Check that the build tools and project files are present
    clean       Move build artifacts of a previous run to the trash

EXAMPLES:
    fwbuild                          # Same as 'fwbuild build'
    fwbuild build --jobs 4           # Run independent builds in parallel
    fwbuild build --keep-intermediates
    fwbuild check
    fwbuild clean --dry-run

For more information on a specific command:
    fwbuild <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if command.startswith("_") or command.startswith("test_"):
                continue
            if command.endswith(".py"):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def cli(self, argv=None) -> CliNameSpace:
        argv = sys.argv[1:] if argv is None else argv
        if len(argv) == 1 and argv[0] in ["--help", "-h"]:
            parser = argparse.ArgumentParser(
                prog="fwbuild",
                formatter_class=argparse.RawDescriptionHelpFormatter,
                description=self.description(),
            )
            parser.add_argument(
                "subcommand",
                metavar=f"{self.get_command_list()}",
                type=str,
                choices=self.get_command_list(),
            )
            parser.print_help()
            sys.exit(0)

        # without a subcommand every option belongs to the default command
        if not argv or argv[0].startswith("-"):
            return CliNameSpace(subcommand=None, remaining=list(argv))

        parser = argparse.ArgumentParser(
            prog="fwbuild",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=False,
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            choices=self.get_command_list(),
        )
        args = parser.parse_args(argv[:1], namespace=CliNameSpace())
        # subcommand options such as --help are left for the subcommand
        args.remaining = argv[1:]
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        subcommand = args.subcommand or DEFAULT_COMMAND
        module = importlib.import_module(f"fwbuild.commands.{subcommand}")
        klass = getattr(module, subcommand.capitalize())
        sub_cmd = klass()
        sub_cmd.exec(context, sub_cmd.cli(args.remaining))


def main():
    cmd = Cli()
    cmd.exec(CliContext(), cmd.cli())


if __name__ == "__main__":
    main()
