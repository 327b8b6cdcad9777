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
Build configuration handler for fwbuild.

Reads FWBUILD.toml from the project directory. The file replaces the scheme
list and the product-to-framework table that used to be hard-coded in the
build script:

    [project]
    workspace = "FirebaseUI.xcworkspace"

    [frameworks]
    schemes = ["FirebaseDatabaseUI", "FirebaseAuthUI"]

    [static_libs]
    Database = "FirebaseDatabaseUI"
    Auth = "FirebaseAuthUI"
"""

import os
import re
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

if sys.version_info >= (3, 11, 0, "alpha", 7):
    import tomllib
else:
    import tomli as tomllib

CONFIG_FILE_NAME = "FWBUILD.toml"

DEFAULT_SDKS = ["iphoneos", "iphonesimulator"]

DEFAULT_TOOLS = {
    "xcodebuild": "xcodebuild",
    "lipo": "lipo",
}


class ConfigError(ValueError):
    """Raised when FWBUILD.toml is missing or invalid."""


@dataclass
class BuildConfig:
    """Everything one pipeline pass needs, with paths relative to the cwd."""
    workspace: str
    schemes: List[str] = field(default_factory=list)
    # product (static library target) -> framework name, in file order
    static_libs: Dict[str, str] = field(default_factory=dict)
    sdks: List[str] = field(default_factory=lambda: list(DEFAULT_SDKS))
    configuration: str = "Release"
    license_file: str = "LICENSE"
    derived_data_dir: str = "artifacts"
    output_dir: str = "Frameworks"
    archive: str = ""
    build_settings: List[str] = field(default_factory=list)
    jobs: int = 1
    compress_level: int = 9
    use_xcrun: bool = False
    timeout_second: int = 0
    tools: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TOOLS))

    def __post_init__(self):
        if not self.archive:
            self.archive = os.path.normpath(self.output_dir) + ".zip"
        self.validate()

    @property
    def reference_sdk(self) -> str:
        """The SDK used for the dynamic framework pass."""
        return self.sdks[0]

    def validate(self):
        if not self.workspace or not isinstance(self.workspace, str):
            raise ConfigError("project.workspace must be a non-empty string")
        if not isinstance(self.schemes, list) or not isinstance(self.sdks, list):
            raise ConfigError("frameworks.schemes and build.sdks must be arrays")
        if not self.sdks:
            raise ConfigError("build.sdks must name at least one sdk")
        for name in list(self.schemes) + list(self.sdks):
            if not isinstance(name, str) or not name:
                raise ConfigError(f"invalid scheme or sdk name: {name!r}")
        if not isinstance(self.static_libs, dict):
            raise ConfigError("[static_libs] must be a table of product = framework")
        for product, framework in self.static_libs.items():
            if not isinstance(framework, str) or not framework:
                raise ConfigError(f"static_libs.{product} must name a framework")
        if not isinstance(self.build_settings, list) or not all(
            isinstance(s, str) and s for s in self.build_settings
        ):
            raise ConfigError("build.build_settings must be an array of non-empty strings")
        if not isinstance(self.tools, dict):
            raise ConfigError("[tools] must be a table")
        for name, tool in self.tools.items():
            if not isinstance(tool, str) or not tool:
                raise ConfigError(f"tools.{name} must be a non-empty string")
        if not isinstance(self.jobs, int) or self.jobs < 1:
            raise ConfigError(f"build.jobs must be a positive integer, got {self.jobs!r}")
        if not 0 <= self.compress_level <= 9:
            raise ConfigError(f"build.compress_level must be 0-9, got {self.compress_level}")
        output_root = os.path.abspath(self.output_dir)
        archive_dir = os.path.dirname(os.path.abspath(self.archive))
        if archive_dir == output_root or archive_dir.startswith(output_root + os.sep):
            raise ConfigError(f"archive {self.archive} must not be inside {self.output_dir}")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "BuildConfig":
        """
        Build a configuration from the parsed TOML tables.

        Args:
            config: Dictionary as returned by tomllib.load

        Raises:
            ConfigError: required keys are missing or values are invalid
        """
        config = _expand_env(config)
        for section in ("project", "build", "tools", "frameworks", "static_libs"):
            if not isinstance(config.get(section, {}), dict):
                raise ConfigError(f"[{section}] must be a table")
        project = config.get("project", {})
        build = config.get("build", {})
        tools = dict(DEFAULT_TOOLS)
        tools.update(config.get("tools", {}))

        if "workspace" not in project:
            raise ConfigError("[project] workspace is required")

        kwargs = {
            "workspace": project["workspace"],
            "schemes": config.get("frameworks", {}).get("schemes", []),
            "static_libs": dict(config.get("static_libs", {})),
            "tools": tools,
        }
        if "configuration" in project:
            kwargs["configuration"] = project["configuration"]
        if "license" in project:
            kwargs["license_file"] = project["license"]
        for key in (
            "sdks",
            "derived_data_dir",
            "output_dir",
            "archive",
            "build_settings",
            "jobs",
            "compress_level",
            "use_xcrun",
            "timeout_second",
        ):
            if key in build:
                kwargs[key] = build[key]
        try:
            return cls(**kwargs)
        except ConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigError(str(e)) from e


def _expand_env(value):
    """
    Expand environment variables in configuration values.

    Supports ${VAR_NAME} syntax; unknown variables are left untouched.
    """
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    if not isinstance(value, str):
        return value
    pattern = re.compile(r"\$\{([^}]+)\}")
    return pattern.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)


def load_build_config(config_path: Optional[str] = None) -> BuildConfig:
    """
    Load FWBUILD.toml, from the current working directory unless a path is given.

    Raises:
        ConfigError: the file is missing, not valid TOML, or invalid
    """
    if not config_path:
        config_path = os.path.join(os.getcwd(), CONFIG_FILE_NAME)

    if not os.path.isfile(config_path):
        raise ConfigError(f"{CONFIG_FILE_NAME} not found at {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"failed to parse {config_path}: {e}") from e

    return BuildConfig.from_dict(data)
