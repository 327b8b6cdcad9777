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

"""Build configuration loaded from FWBUILD.toml."""

from .config import BuildConfig, ConfigError, load_build_config

__all__ = ["BuildConfig", "ConfigError", "load_build_config"]
