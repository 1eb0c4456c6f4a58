# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mount lifecycle operations.

A job moves between two states: unregistered and active.  ``mount_at``
makes it active (layers allocated, directories created, record
registered and persisted); ``unmount`` makes it unregistered again
(filesystem unmounted, record removed and persisted).

The mount flow is a pipeline of step functions (see
:mod:`layermount.manager.mount`).  If any step fails before the record
is registered, everything the failed attempt created is removed again.
Teardown removes bookkeeping whatever the unmount reports, so the state
file never keeps entries for mounts that were asked to go away.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Any

from ..errors import InvalidJobIdError, MountAlreadyActiveError
from ..paths import PathConfig
from ..provisioner import LayerProvisioner
from ..records import MountRecord
from ..registry import MountRegistry
from ..serving import MountSession, SessionFactory
from ..state import StatePersister
from ..unmount import UnmountCoordinator, UnmountOutcome, UnmountStatus
from .contexts import MountContext
from .mount import mount_pipeline

logger = logging.getLogger(__name__)


def _check_job_id(job_id: str) -> None:
    # Job ids double as the default mountpoint name under mount_root.
    if not job_id or job_id in (".", "..") or "/" in job_id or "\0" in job_id:
        raise InvalidJobIdError(job_id)


class MountLifecycleManager:
    """Creates, tracks and tears down per-job overlay mounts.

    Each manager owns its registry and state file; several managers can
    live in one process as long as their state files differ.
    """

    def __init__(
        self,
        paths: PathConfig,
        *,
        base_tree: Any = None,
        session_factory: SessionFactory | None = None,
        unmounter: UnmountCoordinator | None = None,
    ):
        """Initialize the manager and recover previously persisted mounts.

        Args:
            paths: Layer, mountpoint and state file locations.
            base_tree: Shared read-only tree handle, handed unchanged to
                ``session_factory``.
            session_factory: Builds the filesystem session for a new
                mount. Without one, mounts are bookkeeping only.
            unmounter: Runs the external unmount tool for mounts that
                have no session in this process (e.g. recovered ones).

        Raises:
            StateFormatError: If the state file exists but is corrupt.
            OSError: If the state file cannot be read.
        """
        self._paths = paths
        self._base_tree = base_tree
        self._session_factory = session_factory
        self._unmounter = unmounter or UnmountCoordinator()
        self._provisioner = LayerProvisioner(paths)
        self._state = StatePersister(paths.state_file)
        self._registry = MountRegistry(self._state.load())
        self._persist_lock = asyncio.Lock()

        # Sessions started by this manager, keyed by upper layer id.
        self._sessions: dict[str, MountSession] = {}

    @property
    def paths(self) -> PathConfig:
        return self._paths

    @property
    def base_tree(self) -> Any:
        """The shared read-only tree handle."""
        return self._base_tree

    # -------------------------------------------------------------------------
    # Mount
    # -------------------------------------------------------------------------

    async def mount(
        self,
        job_id: str,
        cl_name: str | None = None,
        *,
        exclusive: bool = False,
    ) -> MountRecord:
        """Mount a job at ``{mount_root}/{job_id}``.

        See :meth:`mount_at` for arguments and errors.
        """
        _check_job_id(job_id)
        return await self.mount_at(
            job_id, self._paths.default_mountpoint(job_id), cl_name, exclusive=exclusive,
        )

    async def mount_at(
        self,
        job_id: str,
        mountpoint: str | os.PathLike[str],
        cl_name: str | None = None,
        *,
        exclusive: bool = False,
    ) -> MountRecord:
        """Mount a job at an arbitrary directory.

        Args:
            job_id: Job identifier; the registry key.
            mountpoint: Where to expose the composed view. Need not be
                under the configured mount root.
            cl_name: If given, a changelist layer is allocated as well.
            exclusive: Refuse to replace an active mount of ``job_id``.
                By default an active mount is replaced: its session, if
                this manager started one, is stopped, but its layer
                directories are kept.

        Returns:
            The registered record.

        Raises:
            InvalidJobIdError: ``job_id`` is empty or not a single path
                component.
            MountAlreadyActiveError: ``exclusive`` is set and the job is
                already mounted.
            OSError: A directory could not be created (nothing is left
                behind), or the state file could not be written (the
                mount stays registered in memory).
        """
        _check_job_id(job_id)
        mountpoint = Path(mountpoint)
        start = time.monotonic()
        logger.info(
            "mount start job_id=%s mountpoint=%s cl=%r", job_id, mountpoint, cl_name,
        )

        if exclusive and await self._registry.get(job_id) is not None:
            raise MountAlreadyActiveError(job_id)

        ctx = MountContext(
            job_id=job_id,
            mountpoint=mountpoint,
            cl_name=cl_name,
            exclusive=exclusive,
            provisioner=self._provisioner,
            registry=self._registry,
            base_tree=self._base_tree,
            session_factory=self._session_factory,
        )
        try:
            await mount_pipeline.run(ctx)
        except BaseException:
            await self._rollback(ctx)
            raise

        record = ctx.record
        if record is None:
            raise RuntimeError(f"Mount pipeline did not register {job_id}")
        if ctx.session is not None:
            self._sessions[record.upper_id] = ctx.session
        if ctx.replaced is not None:
            await self._stop_replaced(ctx.replaced)

        await self._persist()

        logger.info(
            "mount done job_id=%s mountpoint=%s elapsed=%.2fs",
            job_id, mountpoint, time.monotonic() - start,
        )
        return record

    async def remount(
        self,
        job_id: str,
        mountpoint: str | os.PathLike[str] | None = None,
        cl_name: str | None = None,
    ) -> MountRecord:
        """Tear down any active mount of ``job_id``, then mount it afresh.

        Args:
            job_id: Job identifier.
            mountpoint: New mountpoint; defaults to ``{mount_root}/{job_id}``.
            cl_name: Changelist layer name for the new mount.
        """
        await self.unmount(job_id)
        if mountpoint is None:
            mountpoint = self._paths.default_mountpoint(job_id)
        return await self.mount_at(job_id, mountpoint, cl_name)

    async def _stop_replaced(self, replaced: MountRecord) -> None:
        """Stop the session of a record that a new mount displaced."""
        session = self._sessions.pop(replaced.upper_id, None)
        if session is None:
            return
        try:
            outcome = await session.stop()
        except Exception:
            logger.exception(
                "Failed to stop replaced session for %s at %s",
                replaced.job_id, replaced.mountpoint,
            )
            return
        self._log_session_outcome(replaced, outcome)

    async def _rollback(self, ctx: MountContext) -> None:
        """Undo a mount that failed before it was registered."""
        if ctx.record is not None:
            return

        if ctx.session is not None:
            try:
                outcome = await ctx.session.stop()
                if not outcome.ok:
                    logger.warning(
                        "Stopping session for failed mount %s: %s",
                        ctx.mountpoint, outcome.message,
                    )
            except Exception:
                logger.exception("Failed to stop session for %s", ctx.mountpoint)

        for path, top in reversed(ctx.created_dirs):
            try:
                await asyncio.to_thread(self._provisioner.remove_dirs, path, top)
            except OSError as e:
                logger.warning("Could not remove %s after failed mount: %s", path, e)
        if ctx.created_dirs:
            logger.info(
                "Removed %d directories left by failed mount of %s",
                len(ctx.created_dirs), ctx.job_id,
            )

    # -------------------------------------------------------------------------
    # Unmount
    # -------------------------------------------------------------------------

    async def unmount(self, job_id: str) -> MountRecord | None:
        """Unmount a job and remove its bookkeeping.

        The record is removed and the state persisted even if the
        filesystem was not mounted or the unmount failed; failures are
        only logged.

        Returns:
            The removed record, or None if ``job_id`` was not mounted
            (nothing is touched in that case).

        Raises:
            UnmountError: The unmount tool could not be started; the
                record stays registered.
            OSError: The state file could not be written.
        """
        record = await self._registry.get(job_id)
        if record is None:
            logger.debug("unmount: no active mount for %s", job_id)
            return None

        # The registry lock is not held here so a slow unmount does not
        # stall other jobs.
        session = self._sessions.get(record.upper_id)
        if session is not None:
            outcome = await session.stop()
            self._log_session_outcome(record, outcome)
        else:
            await self._unmounter.unmount(record.mountpoint)

        self._sessions.pop(record.upper_id, None)
        removed = await self._registry.remove(job_id, expected=record)
        if removed is None:
            logger.info("Mount for %s was removed or replaced during teardown", job_id)
            return None

        await self._persist()
        logger.info("unmount done job_id=%s mountpoint=%s", job_id, record.mountpoint)
        return removed

    @staticmethod
    def _log_session_outcome(record: MountRecord, outcome: UnmountOutcome) -> None:
        if outcome.status is UnmountStatus.SUCCESS:
            logger.info("Stopped serving %s", record.mountpoint)
        elif outcome.status is UnmountStatus.ALREADY_UNMOUNTED:
            logger.warning(
                "%s was not mounted, removing bookkeeping only: %s",
                record.mountpoint, outcome.message,
            )
        else:
            logger.warning(
                "Stopping %s failed: %s", record.mountpoint, outcome.message,
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def list_mounts(self) -> list[MountRecord]:
        """All active mounts, ordered by job id."""
        return await self._registry.snapshot()

    async def get(self, job_id: str) -> MountRecord | None:
        return await self._registry.get(job_id)

    async def _persist(self) -> None:
        # Snapshot and write under one lock so files land in snapshot order.
        async with self._persist_lock:
            records = await self._registry.snapshot()
            await asyncio.to_thread(self._state.save, records)
