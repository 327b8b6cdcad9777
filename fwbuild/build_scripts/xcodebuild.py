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
Value types for the external tool calls of a framework build.

`XcodeBuild` is one xcodebuild invocation, `Lipo` is one `lipo -create`
merge. The module-level helpers expand a BuildConfig into the full list of
calls for each pass.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fwbuild.build_scripts.build_utils import fs_failure
from fwbuild.build_scripts.layout import BuildProductsLayout, StagingLayout
from fwbuild.utils.cmd.cmd_util import run_tool
from fwbuild.utils.config.config import BuildConfig
from fwbuild.utils.context.result import CliResult

# Hard code bitcode so the CocoaPods dummy files are built with bitcode too.
BITCODE_BUILD_SETTING = "BITCODE_GENERATION_MODE=bitcode"

MISSING_INPUT_CODE = 1


def tool_command(config: BuildConfig, name: str) -> List[str]:
    """Command prefix for a developer tool, e.g. ['xcrun', 'lipo']."""
    tool = config.tools.get(name, name)
    if config.use_xcrun:
        return ["xcrun", tool]
    return [tool]


@dataclass
class XcodeBuild:
    """
    A value type representing an xcodebuild call.

    param keys are flags and expect leading dashes, i.e. `-workspace`.
    A None value emits the flag alone.
    """
    params: Dict[str, Optional[str]]
    build_settings: List[str] = field(default_factory=list)
    tool: List[str] = field(default_factory=lambda: ["xcodebuild"])

    @property
    def args(self) -> List[str]:
        args = list(self.tool)
        for key, value in self.params.items():
            args.append(key)
            if value is not None:
                args.append(value)
        args.extend(s for s in self.build_settings if s != BITCODE_BUILD_SETTING)
        args.append(BITCODE_BUILD_SETTING)
        return args

    @property
    def name(self) -> str:
        return f"{self.params.get('-scheme')} ({self.params.get('-sdk')})"

    def launch(self, runner=run_tool, timeout_second=None) -> CliResult:
        return runner(self.args, timeout_second=timeout_second)


@dataclass
class Lipo:
    """A value type representing an invocation of `lipo -create`."""
    inputs: List[str]
    output: str
    tool: List[str] = field(default_factory=lambda: ["lipo"])

    @property
    def args(self) -> List[str]:
        return list(self.tool) + ["-create"] + list(self.inputs) + ["-output", self.output]

    @property
    def name(self) -> str:
        return self.output

    def missing_inputs(self) -> List[str]:
        return [path for path in self.inputs if not os.path.isfile(path)]

    def launch(self, runner=run_tool, timeout_second=None) -> CliResult:
        print(f"lipo {self.output}")
        missing = self.missing_inputs()
        if missing:
            print(f"ERROR: cannot create {self.output}, missing inputs:")
            for path in missing:
                print(f"    {path}")
            return CliResult(error=MISSING_INPUT_CODE)

        # the framework skeleton only exists when the framework is also a scheme
        output_dir = os.path.dirname(self.output) or "."
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            return fs_failure(f"mkdir -p {output_dir} failed", e)
        return runner(self.args, timeout_second=timeout_second)


def _build(config: BuildConfig, scheme: str, sdk: str) -> XcodeBuild:
    return XcodeBuild(
        {
            "-workspace": config.workspace,
            "-scheme": scheme,
            "-configuration": config.configuration,
            "-sdk": sdk,
            "-derivedDataPath": config.derived_data_dir,
        },
        build_settings=list(config.build_settings),
        tool=tool_command(config, "xcodebuild"),
    )


def dynamic_builds(config: BuildConfig) -> List[XcodeBuild]:
    """
    One build per scheme against the reference sdk. Dynamic frameworks give
    us the bundle layout and resources for free; the binary inside is
    replaced by the merged static library later.
    """
    return [_build(config, scheme, config.reference_sdk) for scheme in config.schemes]


def static_builds(config: BuildConfig) -> List[XcodeBuild]:
    """Every static library product for every sdk."""
    return [
        _build(config, product, sdk)
        for sdk in config.sdks
        for product in config.static_libs
    ]


def lipo_merges(config: BuildConfig) -> List[Lipo]:
    products = BuildProductsLayout(config.derived_data_dir, config.configuration)
    staging = StagingLayout(config.output_dir)
    tool = tool_command(config, "lipo")
    merges = []
    for product, framework in config.static_libs.items():
        inputs = [products.static_lib_path(product, sdk) for sdk in config.sdks]
        merges.append(Lipo(inputs, staging.framework_binary(framework), tool=tool))
    return merges
