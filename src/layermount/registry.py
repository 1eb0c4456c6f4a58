# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-memory index of active mounts."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from .errors import MountAlreadyActiveError
from .records import MountRecord


class MountRegistry:
    """Map of job id to its active :class:`MountRecord`.

    Every operation takes the same exclusive lock; there is no unlocked
    read path. Records are immutable, so handing them out is safe.
    """

    def __init__(self, records: Iterable[MountRecord] = ()):
        self._lock = asyncio.Lock()
        self._records: dict[str, MountRecord] = {}
        for record in records:
            self._records[record.job_id] = record

    async def insert(
        self, record: MountRecord, *, replace: bool = True
    ) -> MountRecord | None:
        """Add *record*, replacing any entry for the same job.

        Args:
            record: Record to add.
            replace: If False, refuse to replace an existing entry.

        Returns:
            The replaced record, or None.

        Raises:
            MountAlreadyActiveError: ``replace`` is False and the job
                already has an entry.
        """
        async with self._lock:
            previous = self._records.get(record.job_id)
            if previous is not None and not replace:
                raise MountAlreadyActiveError(record.job_id)
            self._records[record.job_id] = record
            return previous

    async def remove(
        self, job_id: str, expected: MountRecord | None = None
    ) -> MountRecord | None:
        """Remove the entry for *job_id*.

        Args:
            job_id: Job to remove.
            expected: If given, only remove when the current entry is
                still this record (it may have been replaced meanwhile).

        Returns:
            The removed record, or None if nothing was removed.
        """
        async with self._lock:
            current = self._records.get(job_id)
            if current is None:
                return None
            if expected is not None and current != expected:
                return None
            return self._records.pop(job_id)

    async def get(self, job_id: str) -> MountRecord | None:
        async with self._lock:
            return self._records.get(job_id)

    async def snapshot(self) -> list[MountRecord]:
        """Point-in-time copy of all records, ordered by job id."""
        async with self._lock:
            return [self._records[k] for k in sorted(self._records)]
