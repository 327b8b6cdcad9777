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


class CliResult:
    """Outcome of one pipeline step.

    A step either succeeds with a ``value`` or fails with ``error``, the exit
    status of the failing tool (1 for filesystem failures). The first failing
    step's status becomes the status of the whole run.
    """

    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error

    def is_success(self):
        return self.error is None

    def is_failure(self):
        return self.error is not None

    def get_value(self, default=None):
        return self.value if self.is_success() else default

    def get_error(self, default=None):
        return self.error if self.is_failure() else default

    def exit_code(self) -> int:
        """Process exit status for this outcome: 0 on success."""
        return self.error if self.is_failure() else 0

    def __repr__(self):
        if self.is_failure():
            return f"CliResult(error={self.error!r})"
        return f"CliResult(value={self.value!r})"
