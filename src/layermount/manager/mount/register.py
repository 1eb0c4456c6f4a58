# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mount step: build the record and insert it into the registry.

This is the last step; once it has run the mount is visible to
``list_mounts`` and is no longer rolled back on error.
"""

from __future__ import annotations

import logging

from ...records import MountRecord
from ..contexts import MountContext
from . import mount_pipeline

logger = logging.getLogger(__name__)


@mount_pipeline.step(order=900)
async def register_mount(ctx: MountContext) -> None:
    layers = ctx.require_layers()

    record = MountRecord(
        job_id=ctx.job_id,
        mountpoint=ctx.mountpoint,
        upper_id=layers.upper_id,
        upper_dir=layers.upper_dir,
        cl_id=layers.cl_id,
        cl_dir=layers.cl_dir,
    )
    ctx.replaced = await ctx.registry.insert(record, replace=not ctx.exclusive)
    ctx.record = record

    if ctx.replaced is not None:
        # The old layers and mount are not torn down here; use remount()
        # for that.
        logger.warning(
            "Replaced active mount for %s (previous mountpoint %s, upper %s)",
            ctx.job_id, ctx.replaced.mountpoint, ctx.replaced.upper_dir,
        )
