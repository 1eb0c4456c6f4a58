# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Exceptions raised by the mount lifecycle manager.

Filesystem failures (directory creation, state file I/O) are not wrapped
and surface as the builtin :class:`OSError`.
"""

from __future__ import annotations


class LayermountError(Exception):
    """Base class for layermount failures."""


class StateFormatError(LayermountError):
    """The state file exists but cannot be parsed."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class MountAlreadyActiveError(LayermountError):
    """An exclusive mount was requested for a job that is already mounted."""

    def __init__(self, job_id: str):
        super().__init__(f"Job '{job_id}' already has an active mount")
        self.job_id = job_id


class UnmountError(LayermountError):
    """The external unmount tool could not be launched."""


class InvalidJobIdError(LayermountError):
    """A job id cannot be used as a registry key or path component."""

    def __init__(self, job_id: str):
        super().__init__(f"Invalid job id {job_id!r}")
        self.job_id = job_id
