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
import shutil
import argparse

from fwbuild.utils.cmd.cmd_util import exec_command
from fwbuild.utils.config.config import ConfigError, load_build_config
from fwbuild.utils.context.namespace import CliNameSpace
from fwbuild.utils.context.context import CliContext
from fwbuild.utils.context.command import CliCommand


class Check(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to check the build environment.

        Verifies that:
        - FWBUILD.toml loads
        - xcodebuild and lipo (or xcrun) are on PATH
        - the workspace and license file exist

        Examples:
            fwbuild check
            fwbuild check --config path/to/FWBUILD.toml
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="fwbuild check",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--config",
            type=str,
            default=None,
            help="Path to FWBUILD.toml (default: ./FWBUILD.toml)",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        print("🔍 Checking build environment...\n")
        checker = EnvironmentChecker()
        checker.check_all(args.config)
        checker.print_summary()
        sys.exit(1 if checker.errors else 0)


class EnvironmentChecker:
    def __init__(self):
        self.warnings = []
        self.errors = []

    def print_ok(self, msg):
        print(f"  ✅ {msg}")

    def print_error(self, msg):
        print(f"  ❌ {msg}")
        self.errors.append(msg)

    def print_warning(self, msg):
        print(f"  ⚠️  {msg}")
        self.warnings.append(msg)

    def print_section(self, title):
        print(f"\n{'='*60}")
        print(f"  {title}")
        print(f"{'='*60}")

    def check_command_exists(self, command, version_args=None):
        """Check if a command exists in PATH, printing its version when asked"""
        if shutil.which(command) is None:
            self.print_error(f"{command}: Not found")
            return False

        version_str = ""
        if version_args:
            err_code, output = exec_command([command] + version_args)
            if err_code == 0 and output:
                version_str = output.strip().split("\n")[0]
        self.print_ok(f"{command}: Found {version_str}".rstrip())
        return True

    def check_all(self, config_path=None):
        self.print_section("Configuration")
        try:
            config = load_build_config(config_path)
        except ConfigError as e:
            self.print_error(str(e))
            return
        self.print_ok(
            f"{len(config.schemes)} scheme(s), {len(config.static_libs)} static lib(s), "
            f"sdks: {', '.join(config.sdks)}"
        )
        if not config.schemes and not config.static_libs:
            self.print_warning("Nothing to build: no schemes and no static libs")
        unknown = [f for f in config.static_libs.values() if f not in config.schemes]
        if unknown:
            self.print_warning(
                f"Frameworks without a scheme get a bare binary only: {', '.join(unknown)}"
            )

        self.print_section("Tools")
        if config.use_xcrun:
            self.check_command_exists("xcrun", ["--version"])
        else:
            self.check_command_exists(config.tools["xcodebuild"], ["-version"])
            self.check_command_exists(config.tools["lipo"])

        self.print_section("Project files")
        for label, path in [("workspace", config.workspace), ("license", config.license_file)]:
            if os.path.exists(path):
                self.print_ok(f"{label}: {path}")
            else:
                self.print_error(f"{label}: {path} not found")

    def print_summary(self):
        print(f"\n{'='*60}")
        if self.errors:
            print(f"  ❌ {len(self.errors)} error(s), {len(self.warnings)} warning(s)")
        else:
            print(f"  ✅ All checks passed ({len(self.warnings)} warning(s))")
        print(f"{'='*60}")
