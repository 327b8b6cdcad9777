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

"""
Framework build pipeline.

Builds every scheme as a dynamic framework and every static library product
for every sdk with xcodebuild, then assembles the distributable tree:

    1. Create the staging tree (<output_dir>/<scheme>/Frameworks)
    2. Build dynamic frameworks against the reference sdk
    3. Build static libraries for every sdk
    4. Copy the dynamic frameworks into the staging tree
    5. Lipo the per-sdk static libraries into each framework binary
    6. Copy the license file
    7. Zip the staging tree
    8. Trash derived data and the staging tree

The first failing step stops the run and its exit status becomes the exit
status of the process. Nothing is cleaned up on failure.

Output:
    - Archive: <archive> (default <output_dir>.zip)
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed

from fwbuild.build_scripts.build_utils import copy_file, make_dirs, trash_path, zip_dir
from fwbuild.build_scripts.layout import BuildProductsLayout, StagingLayout
from fwbuild.build_scripts.xcodebuild import dynamic_builds, lipo_merges, static_builds
from fwbuild.utils.cmd.cmd_util import run_tool
from fwbuild.utils.config.config import BuildConfig
from fwbuild.utils.context.result import CliResult


class FrameworkPipeline:
    def __init__(self, config: BuildConfig, runner=run_tool, keep_intermediates=False):
        """
        Args:
            config: Loaded build configuration
            runner: Callable(args, timeout_second=None) -> CliResult used for
                every external tool call
            keep_intermediates: Skip trashing derived data and staging tree
        """
        self.config = config
        self.runner = runner
        self.keep_intermediates = keep_intermediates
        self.products = BuildProductsLayout(config.derived_data_dir, config.configuration)
        self.staging = StagingLayout(config.output_dir)

    def steps(self):
        return [
            ("make staging dirs", self.make_staging_dirs),
            ("build dynamic frameworks", self.build_dynamic),
            ("build static libraries", self.build_static),
            ("copy dynamic frameworks", self.copy_dynamic_outputs),
            ("lipo static libraries", self.merge_static_outputs),
            ("copy license", self.copy_license),
            ("zip", self.zip),
            ("clean up", self.cleanup),
        ]

    def run(self) -> int:
        """Run every step in order. Returns the process exit status."""
        before_time = time.time()
        jobs = self.config.jobs
        print(f"==================fwbuild (schemes: {len(self.config.schemes)}, "
              f"static libs: {len(self.config.static_libs)}, jobs: {jobs})========================")

        for name, step in self.steps():
            print(f"\n=================={name}========================")
            result = step()
            if result.is_failure():
                code = result.exit_code()
                print(f"ERROR: {name} failed with exit code {code}. Stopping immediately.")
                return code

        print(time.strftime("%Y-%m-%d %H:%M:%S", time.localtime()))
        print("==================Output========================")
        print(self.config.archive)
        print(f"use time: {int(time.time() - before_time)} s")
        return 0

    def make_staging_dirs(self) -> CliResult:
        for path in [self.config.derived_data_dir, self.config.output_dir]:
            result = make_dirs(path)
            if result.is_failure():
                return result
        for scheme in self.config.schemes:
            result = make_dirs(self.staging.frameworks_dir(scheme))
            if result.is_failure():
                return result
        return CliResult(value=self.config.output_dir)

    def build_dynamic(self) -> CliResult:
        return self._launch_all(dynamic_builds(self.config))

    def build_static(self) -> CliResult:
        return self._launch_all(static_builds(self.config))

    def copy_dynamic_outputs(self) -> CliResult:
        # any sdk gives the bundle layout, the binary is replaced by lipo later
        sdk = self.config.reference_sdk
        for scheme in self.config.schemes:
            result = copy_file(
                self.products.framework_path(scheme, sdk),
                self.staging.frameworks_dir(scheme),
            )
            if result.is_failure():
                return result
        return CliResult(value=len(self.config.schemes))

    def merge_static_outputs(self) -> CliResult:
        return self._launch_all(lipo_merges(self.config))

    def copy_license(self) -> CliResult:
        return copy_file(self.config.license_file, self.config.output_dir)

    def zip(self) -> CliResult:
        return zip_dir(self.config.output_dir, self.config.archive, self.config.compress_level)

    def cleanup(self) -> CliResult:
        if self.keep_intermediates:
            print("   ⏭️  Keeping intermediates")
            return CliResult(value=0)
        for path in [self.config.derived_data_dir, self.config.output_dir]:
            result = trash_path(path)
            if result.is_failure():
                return result
        return CliResult(value=0)

    def _launch_all(self, tasks) -> CliResult:
        """
        Launch XcodeBuild or Lipo tasks. With jobs == 1 they run in order and
        the first failure stops the pass. Otherwise they run on a thread pool;
        the pass returns only after every started task has exited, and the
        first failure in submission order is reported.
        """
        timeout_second = self.config.timeout_second or None
        jobs = self.config.jobs
        total = len(tasks)

        if jobs <= 1 or total <= 1:
            for index, task in enumerate(tasks, 1):
                print(f"[{index}/{total}] {task.name}")
                result = task.launch(self.runner, timeout_second)
                if result.is_failure():
                    return result
            return CliResult(value=total)

        print(f"🚀 Starting {total} tasks with {jobs} workers...")
        failures = {}
        completed_count = 0
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = {}
            for index, task in enumerate(tasks):
                future = executor.submit(task.launch, self.runner, timeout_second)
                futures[future] = index

            for future in as_completed(futures):
                if future.cancelled():
                    continue
                index = futures[future]
                result = future.result()
                completed_count += 1
                if result.is_success():
                    print(f"✅ [{completed_count}/{total}] {tasks[index].name}")
                    continue
                print(f"❌ [{completed_count}/{total}] {tasks[index].name} "
                      f"(exit code {result.get_error()})")
                failures[index] = result
                for pending in futures:
                    pending.cancel()

        if failures:
            return failures[min(failures)]
        return CliResult(value=total)
