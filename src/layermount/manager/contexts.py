# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Context dataclass passed through the mount pipeline steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..provisioner import LayerAllocation, LayerProvisioner
from ..records import MountRecord
from ..registry import MountRegistry
from ..serving import MountSession, SessionFactory


@dataclass
class MountContext:
    """State built up while mounting one job.

    The first fields are the request and the manager's collaborators.
    Steps fill in ``layers``, ``session`` and ``record``, and append
    every directory they create to ``created_dirs``, as a
    ``(directory, top-most newly created ancestor)`` pair, so a failed
    mount can be undone.
    """

    job_id: str
    mountpoint: Path
    cl_name: str | None
    provisioner: LayerProvisioner
    registry: MountRegistry
    exclusive: bool = False
    base_tree: Any = None
    session_factory: SessionFactory | None = None

    layers: LayerAllocation | None = None
    created_dirs: list[tuple[Path, Path]] = field(
        default_factory=lambda: list[tuple[Path, Path]]()
    )
    session: MountSession | None = None
    record: MountRecord | None = None
    replaced: MountRecord | None = None

    def require_layers(self) -> LayerAllocation:
        """Layers allocated by an earlier step."""
        if self.layers is None:
            raise RuntimeError("Layers have not been allocated for this mount")
        return self.layers
