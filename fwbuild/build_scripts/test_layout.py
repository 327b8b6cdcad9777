#!/usr/bin/env python3
"""
Tests for the output path builders.

Run with: python3 -m pytest fwbuild/build_scripts/test_layout.py
"""

import os
import unittest

from fwbuild.build_scripts.layout import BuildProductsLayout, StagingLayout


class TestBuildProductsLayout(unittest.TestCase):
    """Test the xcodebuild derived data convention."""

    def setUp(self):
        self.layout = BuildProductsLayout("artifacts", "Release")

    def test_products_dir(self):
        self.assertEqual(
            self.layout.products_dir("iphonesimulator"),
            os.path.join("artifacts", "Build", "Products", "Release-iphonesimulator"),
        )

    def test_static_lib_path(self):
        self.assertEqual(
            self.layout.static_lib_path("Auth", "iphoneos"),
            os.path.join("artifacts", "Build", "Products", "Release-iphoneos", "libAuth.a"),
        )

    def test_framework_path(self):
        self.assertEqual(
            self.layout.framework_path("FirebaseAuthUI", "iphoneos"),
            os.path.join(
                "artifacts", "Build", "Products", "Release-iphoneos", "FirebaseAuthUI.framework"
            ),
        )

    def test_configuration_is_part_of_the_path(self):
        layout = BuildProductsLayout("dd", "Debug")
        self.assertTrue(layout.products_dir("iphoneos").endswith("Debug-iphoneos"))


class TestStagingLayout(unittest.TestCase):
    """Test the staging tree paths."""

    def test_framework_binary(self):
        layout = StagingLayout("FirebaseUIFrameworks")

        self.assertEqual(
            layout.framework_binary("FirebaseAuthUI"),
            os.path.join(
                "FirebaseUIFrameworks",
                "FirebaseAuthUI",
                "Frameworks",
                "FirebaseAuthUI.framework",
                "FirebaseAuthUI",
            ),
        )

    def test_frameworks_dir(self):
        layout = StagingLayout("out")

        self.assertEqual(layout.frameworks_dir("Alpha"), os.path.join("out", "Alpha", "Frameworks"))
        self.assertEqual(layout.scheme_dir("Alpha"), os.path.join("out", "Alpha"))


if __name__ == "__main__":
    unittest.main()
