#!/usr/bin/env python3
"""
Tests for filesystem and packaging helpers.

Run with: python3 -m pytest fwbuild/build_scripts/test_build_utils.py
"""

import os
import tempfile
import unittest
import zipfile
from unittest.mock import patch

from fwbuild.build_scripts.build_utils import (
    FS_ERROR_CODE,
    copy_file,
    make_dirs,
    move_file,
    trash_path,
    zip_dir,
)


def write(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)


def read(path):
    with open(path, "rb") as f:
        return f.read()


class FsTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = self.tmpdir.name

    def tearDown(self):
        self.tmpdir.cleanup()

    def path(self, *parts):
        return os.path.join(self.root, *parts)


class TestMakeDirs(FsTestCase):
    def test_creates_parents_and_is_idempotent(self):
        target = self.path("a", "b", "Frameworks")

        self.assertTrue(make_dirs(target).is_success())
        self.assertTrue(make_dirs(target).is_success())
        self.assertTrue(os.path.isdir(target))

    def test_file_in_the_way(self):
        write(self.path("a"), b"file")

        result = make_dirs(self.path("a", "b"))

        self.assertEqual(result.get_error(), FS_ERROR_CODE)


class TestCopyFile(FsTestCase):
    """Test no-clobber copies."""

    def test_copy_file_into_dir(self):
        write(self.path("LICENSE"), b"MIT")

        result = copy_file(self.path("LICENSE"), self.path("out"))

        self.assertEqual(result.get_value(), self.path("out", "LICENSE"))
        self.assertEqual(read(self.path("out", "LICENSE")), b"MIT")

    def test_copy_tree_into_dir(self):
        write(self.path("src", "A.framework", "A"), b"binary")
        write(self.path("src", "A.framework", "Headers", "A.h"), b"// A")

        result = copy_file(self.path("src", "A.framework"), self.path("out", "Frameworks"))

        self.assertTrue(result.is_success())
        self.assertEqual(read(self.path("out", "Frameworks", "A.framework", "A")), b"binary")
        self.assertEqual(
            read(self.path("out", "Frameworks", "A.framework", "Headers", "A.h")), b"// A"
        )

    def test_existing_file_is_not_overwritten(self):
        write(self.path("LICENSE"), b"new")
        write(self.path("out", "LICENSE"), b"original")

        result = copy_file(self.path("LICENSE"), self.path("out"))

        self.assertTrue(result.is_success())
        self.assertEqual(read(self.path("out", "LICENSE")), b"original")

    def test_existing_tree_keeps_content_and_gains_missing_entries(self):
        """Test only missing entries are added to an existing tree."""
        write(self.path("src", "A.framework", "A"), b"new binary")
        write(self.path("src", "A.framework", "Info.plist"), b"plist")
        write(self.path("out", "A.framework", "A"), b"original binary")

        result = copy_file(self.path("src", "A.framework"), self.path("out"))

        self.assertTrue(result.is_success())
        self.assertEqual(read(self.path("out", "A.framework", "A")), b"original binary")
        self.assertEqual(read(self.path("out", "A.framework", "Info.plist")), b"plist")

    @unittest.skipIf(os.name != "posix", "symlinks")
    def test_symlinks_are_preserved(self):
        write(self.path("src", "A.framework", "Versions", "A", "A"), b"binary")
        os.symlink("A", self.path("src", "A.framework", "Versions", "Current"))

        copy_file(self.path("src", "A.framework"), self.path("out"))

        link = self.path("out", "A.framework", "Versions", "Current")
        self.assertTrue(os.path.islink(link))
        self.assertEqual(os.readlink(link), "A")

    def test_missing_source_is_fatal(self):
        result = copy_file(self.path("nope.framework"), self.path("out"))

        self.assertEqual(result.get_error(), FS_ERROR_CODE)
        self.assertFalse(os.path.exists(self.path("out")))


class TestMoveFile(FsTestCase):
    """Test no-clobber moves."""

    def test_move(self):
        write(self.path("a.zip"), b"zip")

        result = move_file(self.path("a.zip"), self.path("dist"))

        self.assertEqual(result.get_value(), self.path("dist", "a.zip"))
        self.assertFalse(os.path.exists(self.path("a.zip")))
        self.assertEqual(read(self.path("dist", "a.zip")), b"zip")

    def test_existing_target_is_kept(self):
        write(self.path("a.zip"), b"new")
        write(self.path("dist", "a.zip"), b"original")

        result = move_file(self.path("a.zip"), self.path("dist"))

        self.assertTrue(result.is_success())
        self.assertEqual(read(self.path("dist", "a.zip")), b"original")
        self.assertTrue(os.path.exists(self.path("a.zip")))

    def test_missing_source_is_fatal(self):
        result = move_file(self.path("nope"), self.path("dist"))

        self.assertEqual(result.get_error(), FS_ERROR_CODE)


class TestTrashPath(FsTestCase):
    """Test moving to the trash."""

    @patch("fwbuild.build_scripts.build_utils.send2trash")
    def test_trash(self, mock_send2trash):
        os.makedirs(self.path("artifacts"))

        result = trash_path(self.path("artifacts"))

        self.assertTrue(result.is_success())
        mock_send2trash.assert_called_once_with(self.path("artifacts"))

    @patch("fwbuild.build_scripts.build_utils.send2trash")
    def test_missing_path_is_noop(self, mock_send2trash):
        result = trash_path(self.path("artifacts"))

        self.assertTrue(result.is_success())
        mock_send2trash.assert_not_called()

    @patch("fwbuild.build_scripts.build_utils.send2trash")
    def test_failure_is_fatal(self, mock_send2trash):
        mock_send2trash.side_effect = PermissionError("denied")
        os.makedirs(self.path("artifacts"))

        with patch("builtins.print") as mock_print:
            result = trash_path(self.path("artifacts"))

        self.assertEqual(result.get_error(), FS_ERROR_CODE)
        printed = " ".join(str(c.args[0]) for c in mock_print.call_args_list)
        self.assertIn(os.getcwd(), printed)
        self.assertIn("denied", printed)


class TestZipDir(FsTestCase):
    """Test packaging the staging tree."""

    def make_tree(self):
        write(self.path("Out", "LICENSE"), b"MIT")
        write(self.path("Out", "A", "Frameworks", "A.framework", "A"), b"fat binary" * 100)

    def test_entries_are_rooted_at_the_directory_name(self):
        self.make_tree()

        result = zip_dir(self.path("Out"), self.path("Out.zip"))

        self.assertTrue(result.is_success())
        with zipfile.ZipFile(self.path("Out.zip")) as zf:
            names = zf.namelist()
            self.assertIn("Out/LICENSE", names)
            self.assertIn("Out/A/Frameworks/A.framework/A", names)
            self.assertEqual(zf.read("Out/A/Frameworks/A.framework/A"), b"fat binary" * 100)
            self.assertEqual(zf.getinfo("Out/LICENSE").compress_type, zipfile.ZIP_DEFLATED)

    def test_archive_is_deterministic(self):
        """Test identical trees give identical archives whatever the mtimes."""
        self.make_tree()
        zip_dir(self.path("Out"), self.path("first.zip"))
        os.utime(self.path("Out", "LICENSE"), (1, 1))
        zip_dir(self.path("Out"), self.path("second.zip"))

        self.assertEqual(read(self.path("first.zip")), read(self.path("second.zip")))

    def test_existing_archive_is_replaced(self):
        self.make_tree()
        write(self.path("Out.zip"), b"stale")

        result = zip_dir(self.path("Out"), self.path("Out.zip"))

        self.assertTrue(result.is_success())
        self.assertTrue(zipfile.is_zipfile(self.path("Out.zip")))

    def test_missing_dir_is_fatal(self):
        result = zip_dir(self.path("Out"), self.path("Out.zip"))

        self.assertEqual(result.get_error(), FS_ERROR_CODE)
        self.assertFalse(os.path.exists(self.path("Out.zip")))


if __name__ == "__main__":
    unittest.main()
