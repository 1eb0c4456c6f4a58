# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Per-job copy-on-write overlay mounts over a shared read-only tree.

Each build job gets a writable upper layer (and optionally a changelist
layer) stacked over the shared base tree::

    upper (rw)    <- job-specific writes
    CL (rw)       <- optional changelist overlay
    base (ro)     <- shared source tree

:class:`MountLifecycleManager` allocates those layers, tracks which jobs
are mounted and persists that across restarts.  Serving the composed
filesystem is left to a pluggable session factory.
"""

from __future__ import annotations

from .config import LayermountConfig, load_config
from .errors import (
    InvalidJobIdError,
    LayermountError,
    MountAlreadyActiveError,
    StateFormatError,
    UnmountError,
)
from .manager import MountLifecycleManager
from .paths import PathConfig
from .records import MountRecord
from .unmount import UnmountCoordinator, UnmountOutcome, UnmountStatus

__version__ = "0.1.0"

__all__ = [
    "InvalidJobIdError",
    "LayermountConfig",
    "LayermountError",
    "MountAlreadyActiveError",
    "MountLifecycleManager",
    "MountRecord",
    "PathConfig",
    "StateFormatError",
    "UnmountCoordinator",
    "UnmountError",
    "UnmountOutcome",
    "UnmountStatus",
    "load_config",
]
