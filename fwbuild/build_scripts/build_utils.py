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
Filesystem and packaging helpers for the framework build.

Every helper returns a CliResult instead of raising, so the pipeline can stop
on the first failure with the right exit status:
- Directory creation, no-clobber copy and move
- Moving intermediates to the trash (send2trash)
- Deterministic zip of the staging tree
"""

import os
import shutil
import stat
import zipfile

from send2trash import send2trash

from fwbuild.utils.context.result import CliResult

# exit status for filesystem precondition failures
FS_ERROR_CODE = 1

# fixed entry timestamp so archives of identical trees are identical
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def fs_failure(message, error=None) -> CliResult:
    """Print an error with the current directory and return a failed result."""
    print(f"ERROR: {message}")
    try:
        print(f"   cwd: {os.getcwd()}")
    except OSError:
        print("   cwd: <unavailable>")
    if error is not None:
        print(f"   {error}")
    return CliResult(error=FS_ERROR_CODE)


def warn_exists(path):
    print(f"   ⚠️  Warning: {path} already exists, not overwriting")


def make_dirs(path) -> CliResult:
    """Create path and any missing parents, no-op when present."""
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        return fs_failure(f"mkdir -p {path} failed", e)
    return CliResult(value=path)


def _copy_no_clobber(src, dst):
    """
    Recursively copy src to dst, skipping every destination entry that
    already exists. Missing entries are still filled in, like `cp -R -n`.
    Returns the number of skipped entries.
    """
    dst_is_real_dir = os.path.isdir(dst) and not os.path.islink(dst)

    if os.path.islink(src):
        if os.path.lexists(dst):
            warn_exists(dst)
            return 1
        os.symlink(os.readlink(src), dst)
        return 0

    if os.path.isdir(src):
        if os.path.lexists(dst) and not dst_is_real_dir:
            warn_exists(dst)
            return 1
        os.makedirs(dst, exist_ok=True)
        skipped = 0
        for name in sorted(os.listdir(src)):
            skipped += _copy_no_clobber(os.path.join(src, name), os.path.join(dst, name))
        return skipped

    if os.path.lexists(dst):
        warn_exists(dst)
        return 1
    shutil.copy2(src, dst)
    return 0


def copy_file(src, dst_dir) -> CliResult:
    """
    Copy a file or directory tree into dst_dir, never overwriting.

    Args:
        src: Source file or directory path, must exist
        dst_dir: Destination directory, created when missing

    Returns:
        CliResult: value is the copied path, error is FS_ERROR_CODE when src
        is missing or the copy fails
    """
    if not os.path.lexists(src):
        return fs_failure(f"cannot copy {src}: no such file or directory")

    dst = os.path.join(dst_dir, os.path.basename(os.path.normpath(src)))
    print(f"cp -R -n {src} {dst_dir}")
    try:
        os.makedirs(dst_dir, exist_ok=True)
        skipped = _copy_no_clobber(src, dst)
    except OSError as e:
        return fs_failure(f"cp {src} {dst_dir} failed", e)
    if skipped:
        print(f"   ⚠️  Warning: kept {skipped} existing entries under {dst}")
    return CliResult(value=dst)


def move_file(src, dst_dir) -> CliResult:
    """Move src into dst_dir; skipped with a warning when the target exists."""
    if not os.path.lexists(src):
        return fs_failure(f"cannot move {src}: no such file or directory")

    dst = os.path.join(dst_dir, os.path.basename(os.path.normpath(src)))
    print(f"mv -n {src} {dst_dir}")
    if os.path.lexists(dst):
        warn_exists(dst)
        return CliResult(value=dst)
    try:
        os.makedirs(dst_dir, exist_ok=True)
        shutil.move(src, dst)
    except OSError as e:
        return fs_failure(f"mv {src} {dst_dir} failed", e)
    return CliResult(value=dst)


def trash_path(path) -> CliResult:
    """Move path to the trash so it stays recoverable."""
    if not os.path.lexists(path):
        print(f"   ℹ️  {path} does not exist, nothing to trash")
        return CliResult(value=path)
    print(f"trash {path}")
    try:
        send2trash(path)
    except OSError as e:
        return fs_failure(f"failed to move {path} to trash", e)
    return CliResult(value=path)


def _zip_info(arcname, mode) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(arcname, date_time=ZIP_DATE_TIME)
    info.create_system = 3  # unix, so external_attr carries the mode
    info.external_attr = (mode & 0xFFFF) << 16
    return info


def _write_zip_entry(zf, path, arcname, compress_level):
    st = os.lstat(path)
    if stat.S_ISLNK(st.st_mode):
        info = _zip_info(arcname, st.st_mode)
        zf.writestr(info, os.readlink(path))
    elif stat.S_ISDIR(st.st_mode):
        info = _zip_info(arcname + "/", st.st_mode)
        info.external_attr |= 0x10  # MS-DOS directory flag
        zf.writestr(info, b"")
    else:
        info = _zip_info(arcname, st.st_mode)
        info.compress_type = zipfile.ZIP_DEFLATED
        with open(path, "rb") as f:
            zf.writestr(info, f.read(), compresslevel=compress_level)


def zip_dir(src_dir, zip_path, compress_level=9) -> CliResult:
    """
    Zip a directory recursively, like `zip -r -<level> zip_path src_dir`.

    Entries are rooted at the directory's own name, written in sorted order
    with fixed timestamps. Symlinks are stored as links. An existing archive
    at zip_path is replaced.
    """
    if not os.path.isdir(src_dir):
        return fs_failure(f"cannot zip {src_dir}: not a directory")

    src_dir = os.path.normpath(src_dir)
    parent = os.path.dirname(os.path.abspath(src_dir))
    print(f"zip -r -{compress_level} {zip_path} {src_dir}")
    try:
        zip_parent = os.path.dirname(zip_path)
        if zip_parent:
            os.makedirs(zip_parent, exist_ok=True)
        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
            _write_zip_entry(zf, src_dir, os.path.basename(src_dir), compress_level)
            for root, dirs, files in os.walk(src_dir):
                dirs.sort()
                for name in sorted(dirs + files):
                    path = os.path.join(root, name)
                    arcname = os.path.relpath(os.path.abspath(path), parent)
                    _write_zip_entry(zf, path, arcname, compress_level)
    except OSError as e:
        return fs_failure(f"zip {zip_path} failed", e)

    size_mb = os.path.getsize(zip_path) / (1024 * 1024)
    print(f"   ✅ Created: {zip_path} ({size_mb:.2f} MB)")
    return CliResult(value=zip_path)
