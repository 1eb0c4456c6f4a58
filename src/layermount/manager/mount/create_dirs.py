# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mount step: create layer directories and the mountpoint."""

from __future__ import annotations

import asyncio

from ..contexts import MountContext
from . import mount_pipeline


@mount_pipeline.step(order=200)
async def create_directories(ctx: MountContext) -> None:
    """Create the upper dir, the changelist dir (if any), then the mountpoint.

    Stops at the first OSError.  Whatever was created before that point
    is recorded in ``ctx.created_dirs`` for the manager to remove.
    """
    layers = ctx.require_layers()

    for path in [*layers.directories(), ctx.mountpoint]:
        created = await asyncio.to_thread(ctx.provisioner.make_dirs, path)
        if created is not None:
            ctx.created_dirs.append((path, created))
