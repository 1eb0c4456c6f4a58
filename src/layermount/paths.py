# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Root locations for layers, mountpoints and the state file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import LayermountConfig


@dataclass(frozen=True)
class PathConfig:
    """Where a manager places per-job layers and its state.

    Attributes:
        upper_root: Root directory for per-job writable (upper) layers.
        cl_root: Root directory for changelist layers, when requested.
        mount_root: Base directory for default mountpoints.
        state_file: Location of the persisted mount state document.
    """

    upper_root: Path
    cl_root: Path
    mount_root: Path
    state_file: Path

    def __post_init__(self) -> None:
        # Accept plain strings from callers; store Paths.
        for name in ("upper_root", "cl_root", "mount_root", "state_file"):
            object.__setattr__(self, name, Path(getattr(self, name)))

    @classmethod
    def from_config(cls, config: LayermountConfig) -> PathConfig:
        """Build paths from a loaded configuration."""
        return cls(
            upper_root=config.upper_root,
            cl_root=config.cl_root,
            mount_root=config.mount_root,
            state_file=config.state_file,
        )

    def default_mountpoint(self, job_id: str) -> Path:
        """Mountpoint used when the caller does not pick one."""
        return self.mount_root / job_id
