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
import argparse

from fwbuild.build_scripts.build_frameworks import FrameworkPipeline
from fwbuild.utils.config.config import ConfigError, load_build_config
from fwbuild.utils.context.namespace import CliNameSpace
from fwbuild.utils.context.context import CliContext
from fwbuild.utils.context.command import CliCommand


class Build(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to build, lipo and package all frameworks.

        Steps:
            1. xcodebuild every scheme as a dynamic framework (reference sdk)
            2. xcodebuild every static library product for every sdk
            3. copy the dynamic frameworks into the staging directory
            4. lipo the static libraries into the framework binaries
            5. copy the license file and zip the staging directory
            6. move derived data and the staging directory to the trash

        The run stops at the first failing tool and exits with its exit code.

        Examples:
            fwbuild build
            fwbuild build --jobs 4
            fwbuild build --config path/to/FWBUILD.toml --keep-intermediates
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="fwbuild build",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--config",
            type=str,
            default=None,
            help="Path to FWBUILD.toml (default: ./FWBUILD.toml)",
        )
        parser.add_argument(
            "-j", "--jobs",
            type=int,
            default=None,
            help="Number of builds and merges to run in parallel (default: from config, 1)",
        )
        parser.add_argument(
            "--keep-intermediates",
            action="store_true",
            help="Do not move derived data and the staging directory to the trash",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        try:
            config = load_build_config(args.config)
            if args.jobs is not None:
                config.jobs = args.jobs
                config.validate()
        except ConfigError as e:
            print(f"ERROR: {e}")
            sys.exit(1)

        pipeline = FrameworkPipeline(config, keep_intermediates=args.keep_intermediates)
        sys.exit(pipeline.run())
