# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mount lifecycle management: public API re-exports."""

from .service import MountLifecycleManager

__all__ = ["MountLifecycleManager"]
