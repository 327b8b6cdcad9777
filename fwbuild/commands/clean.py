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

from fwbuild.build_scripts.build_utils import trash_path
from fwbuild.utils.config.config import ConfigError, load_build_config
from fwbuild.utils.context.namespace import CliNameSpace
from fwbuild.utils.context.context import CliContext
from fwbuild.utils.context.command import CliCommand


class Clean(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to move build artifacts to the trash.

        A failed build leaves its intermediates behind on purpose. This
        removes them:
        - <derived_data_dir>/     # xcodebuild derived data
        - <output_dir>/           # staging directory
        - <archive>               # only with --archive

        Examples:
            fwbuild clean              # Trash derived data and staging dir
            fwbuild clean --archive    # Also trash the zip archive
            fwbuild clean --dry-run    # Preview what will be trashed
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="fwbuild clean",
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
            "--archive",
            action="store_true",
            help="Also trash the zip archive",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be trashed without actually trashing",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        try:
            config = load_build_config(args.config)
        except ConfigError as e:
            print(f"ERROR: {e}")
            sys.exit(1)

        paths = [config.derived_data_dir, config.output_dir]
        if args.archive:
            paths.append(config.archive)

        cleaner = ArtifactCleaner(dry_run=args.dry_run)
        for path in paths:
            cleaner.trash(path)
        cleaner.print_summary()
        sys.exit(1 if cleaner.failed_paths else 0)


class ArtifactCleaner:
    def __init__(self, dry_run=False):
        self.dry_run = dry_run
        self.cleaned_paths = []
        self.failed_paths = []

    def trash(self, path):
        """Trash one path and track the result"""
        if not os.path.lexists(path):
            print(f"  ℹ️  {path} does not exist")
            return False

        if self.dry_run:
            print(f"  [DRY RUN] Would trash: {path}")
            return True

        result = trash_path(path)
        if result.is_failure():
            self.failed_paths.append(path)
            print(f"  ❌ Failed to trash {path}")
            return False
        self.cleaned_paths.append(path)
        print(f"  ✅ Trashed: {path}")
        return True

    def print_summary(self):
        print("\n" + "=" * 60)
        if self.dry_run:
            print("  Dry run, nothing was trashed")
        else:
            print(f"  Trashed {len(self.cleaned_paths)} path(s)")
        if self.failed_paths:
            print(f"  Failed: {', '.join(self.failed_paths)}")
        print("=" * 60)
