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

import subprocess
from threading import Timer

from fwbuild.utils.context.result import CliResult

DEFAULT_TIMEOUT_SECOND = 10

# exit status reported when the executable cannot be launched at all
LAUNCH_FAILED_CODE = 127


def decode_bytes(input: bytes) -> str:
    try:
        return bytes.decode(input, "UTF-8")
    except UnicodeDecodeError:
        return bytes.decode(input, "latin-1")


def exec_command(command, timeout_second=DEFAULT_TIMEOUT_SECOND):
    """
    Run a command with its output captured, used to probe tool versions.

    Returns:
        tuple: (err_code, err_msg) where err_msg is the combined stdout/stderr.
    """
    try:
        compile_popen = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as e:
        return LAUNCH_FAILED_CODE, str(e)
    timer = Timer(timeout_second, lambda process: process.kill(), [compile_popen])
    try:
        timer.start()
        stdout, _ = compile_popen.communicate()
    finally:
        timer.cancel()
    err_code = compile_popen.returncode
    err_msg = decode_bytes(stdout or b"")
    if err_code == -9 and not err_msg:
        err_msg = f"Failed for timeout({err_code})"
    return err_code, err_msg


def run_tool(args, timeout_second=None) -> CliResult:
    """
    Launch an external tool and block until it exits.

    The child inherits stdout and stderr, so the tool's own output goes
    straight to the console. The command line is echoed before it runs.

    Args:
        args: Executable followed by its arguments (no shell involved)
        timeout_second: Kill the child after this many seconds, None or 0
            waits forever

    Returns:
        CliResult: value is 0 on success, error is the non-zero exit status
    """
    print(" ".join(args))
    try:
        popen = subprocess.Popen(args)
    except OSError as e:
        print(f"ERROR: failed to launch {args[0]}: {e}")
        return CliResult(error=LAUNCH_FAILED_CODE)

    timer = None
    if timeout_second:
        timer = Timer(timeout_second, lambda process: process.kill(), [popen])
        timer.start()
    try:
        err_code = popen.wait()
    finally:
        if timer:
            timer.cancel()

    if err_code != 0:
        return CliResult(error=err_code)
    return CliResult(value=err_code)
