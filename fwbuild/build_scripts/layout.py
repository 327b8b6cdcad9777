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
Path builders for the build tool's output tree and the staging tree.

xcodebuild places products of a `-derivedDataPath` build under
`<derivedDataPath>/Build/Products/<configuration>-<sdk>/`. Keeping that
convention here, instead of concatenating strings at every call site, means
a change of convention only touches this module.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class BuildProductsLayout:
    derived_data_dir: str
    configuration: str = "Release"

    def products_dir(self, sdk: str) -> str:
        return os.path.join(
            self.derived_data_dir, "Build", "Products", f"{self.configuration}-{sdk}"
        )

    def framework_path(self, scheme: str, sdk: str) -> str:
        """Dynamic framework bundle produced by building `scheme`."""
        return os.path.join(self.products_dir(sdk), f"{scheme}.framework")

    def static_lib_path(self, product: str, sdk: str) -> str:
        """Single-sdk static library produced by building `product`."""
        return os.path.join(self.products_dir(sdk), f"lib{product}.a")


@dataclass(frozen=True)
class StagingLayout:
    """
    The tree that gets zipped:

        <output_dir>/
        ├── LICENSE
        └── <name>/Frameworks/<name>.framework/<name>
    """
    output_dir: str

    def scheme_dir(self, name: str) -> str:
        return os.path.join(self.output_dir, name)

    def frameworks_dir(self, name: str) -> str:
        return os.path.join(self.scheme_dir(name), "Frameworks")

    def framework_dir(self, name: str) -> str:
        return os.path.join(self.frameworks_dir(name), f"{name}.framework")

    def framework_binary(self, name: str) -> str:
        return os.path.join(self.framework_dir(name), name)
