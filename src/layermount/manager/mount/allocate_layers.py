# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mount step: reserve fresh upper (and changelist) layer identifiers."""

from __future__ import annotations

from ..contexts import MountContext
from . import mount_pipeline


@mount_pipeline.step(order=100)
async def allocate_layers(ctx: MountContext) -> None:
    ctx.layers = ctx.provisioner.allocate(ctx.job_id, ctx.cl_name)
