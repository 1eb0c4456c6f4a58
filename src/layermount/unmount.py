# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Running the external unmount tool and classifying what it reported.

``fusermount -u`` exits non-zero both for real failures and for targets
that were never mounted (or were already unmounted).  The latter are
idempotent no-ops for teardown purposes, so the diagnostic text is
inspected to tell them apart.  Wording differs between fuse versions,
hence several patterns.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import UnmountError

if TYPE_CHECKING:
    from .config import LayermountConfig

logger = logging.getLogger(__name__)

DEFAULT_UNMOUNT_COMMAND: tuple[str, ...] = ("fusermount", "-u")

# Lower-cased fragments meaning "there was nothing to unmount".
_NOT_MOUNTED_PATTERNS = (
    "not mounted",
    "invalid argument",
    "not found in /etc/mtab",
)


class UnmountStatus(enum.Enum):
    """How an unmount attempt ended."""

    SUCCESS = "success"
    ALREADY_UNMOUNTED = "already-unmounted"
    FAILED = "failed"


@dataclass(frozen=True)
class UnmountOutcome:
    """Result of an unmount attempt plus any diagnostic text."""

    status: UnmountStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not UnmountStatus.FAILED


def classify_unmount(returncode: int, diagnostic: str) -> UnmountOutcome:
    """Map an unmount tool's exit status and stderr to an outcome."""
    message = diagnostic.strip()
    if returncode == 0:
        return UnmountOutcome(UnmountStatus.SUCCESS, message)
    lowered = message.lower()
    if any(pattern in lowered for pattern in _NOT_MOUNTED_PATTERNS):
        return UnmountOutcome(UnmountStatus.ALREADY_UNMOUNTED, message)
    return UnmountOutcome(
        UnmountStatus.FAILED, message or f"exited with status {returncode}"
    )


class UnmountCoordinator:
    """Invokes the unmount tool for a mountpoint.

    The coordinator never retries and never raises for a tool that ran
    and failed; the outcome is returned so that teardown can carry on
    removing bookkeeping regardless.
    """

    def __init__(self, command: Sequence[str] = DEFAULT_UNMOUNT_COMMAND):
        if not command:
            raise ValueError("unmount command must not be empty")
        self._command = tuple(command)

    @classmethod
    def from_config(cls, config: LayermountConfig) -> UnmountCoordinator:
        return cls(config.unmount_command)

    @property
    def command(self) -> tuple[str, ...]:
        return self._command

    async def unmount(self, mountpoint: Path) -> UnmountOutcome:
        """Run the unmount tool against *mountpoint*.

        Returns:
            The classified outcome.

        Raises:
            UnmountError: If the tool could not be started at all.
        """
        logger.info("Attempting to unmount %s", mountpoint)
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._command,
                str(mountpoint),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise UnmountError(
                f"Failed to run {' '.join(self._command)}: {e}"
            ) from e

        stdout, stderr = await proc.communicate()
        diagnostic = stderr.decode(errors="replace") or stdout.decode(errors="replace")
        returncode = await proc.wait()
        outcome = classify_unmount(returncode, diagnostic)

        if outcome.status is UnmountStatus.SUCCESS:
            logger.info("Successfully unmounted %s", mountpoint)
        elif outcome.status is UnmountStatus.ALREADY_UNMOUNTED:
            logger.warning(
                "%s is not mounted, removing bookkeeping only: %s",
                mountpoint, outcome.message,
            )
        else:
            logger.warning(
                "%s failed with status %d for %s: %s",
                self._command[0], returncode, mountpoint, outcome.message,
            )
        return outcome
