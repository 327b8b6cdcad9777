#
# Copyright 2024 fwbuild Project. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

from setuptools import setup, find_packages

ALL_PROGRAM_ENTRIES = ["fwbuild = fwbuild.cli:main"]

with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="fwbuild",
    version="1.0.0",
    description="Build, lipo and package Xcode frameworks.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="fwbuild Project Authors",
    packages=find_packages(include=["fwbuild", "fwbuild.*"]),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "Send2Trash>=1.8.0",
        'tomli>=2.0.0; python_version < "3.11"',
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Operating System :: MacOS :: MacOS X",
    ],
    zip_safe=False,
    entry_points={"console_scripts": ALL_PROGRAM_ENTRIES},
)
