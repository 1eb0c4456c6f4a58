# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mount pipeline: allocate layers, create directories, serve, register.

Importing this package registers all steps with the pipeline.
"""

from ...pipeline import Pipeline
from ..contexts import MountContext

mount_pipeline = Pipeline[MountContext]("mount")

# Import step modules so their decorators register with the pipeline.
from . import allocate_layers as _  # noqa: F401, E402
from . import create_dirs as _  # noqa: F401, E402
from . import start_serving as _  # noqa: F401, E402
from . import register as _  # noqa: F401, E402
