# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Allocation of per-job writable and changelist layer directories."""

from __future__ import annotations

import errno
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path

from .paths import PathConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayerAllocation:
    """Identifiers and directories reserved for one mount."""

    upper_id: str
    upper_dir: Path
    cl_id: str | None = None
    cl_dir: Path | None = None

    def directories(self) -> list[Path]:
        """Layer directories in creation order (upper first)."""
        dirs = [self.upper_dir]
        if self.cl_dir is not None:
            dirs.append(self.cl_dir)
        return dirs


class LayerProvisioner:
    """Hands out fresh layer identifiers under the configured roots.

    Identifiers are random UUID4 strings and never derived from the job
    id, so mounting the same job twice never reuses an old upper layer.
    """

    def __init__(self, paths: PathConfig):
        self._paths = paths

    def allocate(self, job_id: str, cl_name: str | None = None) -> LayerAllocation:
        """Reserve layer identifiers for a job.

        Args:
            job_id: Job the layers are for (only used for logging).
            cl_name: If given, also allocate a changelist layer.

        Returns:
            LayerAllocation. Nothing is created on disk yet.
        """
        upper_id = str(uuid.uuid4())
        cl_id = str(uuid.uuid4()) if cl_name is not None else None
        allocation = LayerAllocation(
            upper_id=upper_id,
            upper_dir=self._paths.upper_root / upper_id,
            cl_id=cl_id,
            cl_dir=self._paths.cl_root / cl_id if cl_id is not None else None,
        )
        logger.debug(
            "Allocated layers for %s: upper=%s cl=%s (requested cl=%r)",
            job_id, allocation.upper_id, allocation.cl_id, cl_name,
        )
        return allocation

    @staticmethod
    def make_dirs(path: Path) -> Path | None:
        """Create *path* and any missing parents.

        Succeeds whether or not the directory already exists.

        Returns:
            The top-most directory created by this call, so the caller
            can remove everything it added, or None if nothing was
            created.

        Raises:
            OSError: If the storage rejects the operation.
        """
        first_missing: Path | None = None
        candidate = path
        while not candidate.exists():
            first_missing = candidate
            if candidate.parent == candidate:
                break
            candidate = candidate.parent
        os.makedirs(path, exist_ok=True)
        return first_missing

    @staticmethod
    def remove_dirs(path: Path, top: Path) -> None:
        """Remove *path* and then its parents up to and including *top*.

        Only empty directories are removed; the walk stops at the first
        one that still has contents (another job may be using it).
        """
        current = path
        while True:
            try:
                current.rmdir()
            except FileNotFoundError:
                pass
            except OSError as e:
                if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                    logger.debug("Keeping non-empty directory %s", current)
                    return
                raise
            if current == top or current.parent == current:
                return
            current = current.parent
