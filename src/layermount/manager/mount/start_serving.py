# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mount step: start the filesystem session, when the manager has a factory."""

from __future__ import annotations

import logging

from ..contexts import MountContext
from . import mount_pipeline

logger = logging.getLogger(__name__)


@mount_pipeline.step(order=300)
async def start_serving(ctx: MountContext) -> None:
    if ctx.session_factory is None:
        return
    layers = ctx.require_layers()

    session = ctx.session_factory(
        ctx.mountpoint, ctx.base_tree, layers.upper_dir, layers.cl_dir,
    )
    await session.start()
    ctx.session = session
    logger.debug("Started serving %s for %s", ctx.mountpoint, ctx.job_id)
