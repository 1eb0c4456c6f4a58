# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Contracts for the filesystem server that actually serves a mount.

The union filesystem itself lives elsewhere.  The manager only needs to
construct a session for a mount, start it, and later stop it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from .unmount import UnmountOutcome


class MountSession(Protocol):
    """A running (or startable) filesystem session for one mountpoint."""

    async def start(self) -> None:
        """Begin serving the composed view at the mountpoint."""
        ...

    async def stop(self) -> UnmountOutcome:
        """Stop serving and report how the unmount went."""
        ...


class SessionFactory(Protocol):
    """Builds a :class:`MountSession` from a mount's layers.

    ``base_tree`` is the manager's shared read-only tree handle and is
    passed through untouched.
    """

    def __call__(
        self,
        mountpoint: Path,
        base_tree: Any,
        upper_dir: Path,
        cl_dir: Path | None,
    ) -> MountSession: ...
