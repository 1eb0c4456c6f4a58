# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Configuration file loading.

Settings are read with :mod:`configparser` from the system-wide file
and then the user's file, so user values override system ones::

    [paths]
    upper_root = /var/lib/layermount/upper
    cl_root = /var/lib/layermount/cl
    mount_root = /var/lib/layermount/mounts
    state_file = /var/lib/layermount/state.json

    [unmount]
    command = fusermount -u

Nothing here is cached; callers load a config and hand it to the
components that need it.
"""

from __future__ import annotations

import configparser
import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

from .unmount import DEFAULT_UNMOUNT_COMMAND

logger = logging.getLogger(__name__)

SYSTEM_CONFIG_PATH = Path("/etc/layermount/layermount.conf")
USER_CONFIG_RELPATH = Path(".config/layermount/layermount.conf")

DEFAULT_DATA_ROOT = Path("/var/lib/layermount")


@dataclass(frozen=True)
class LayermountConfig:
    """Resolved configuration values."""

    upper_root: Path = DEFAULT_DATA_ROOT / "upper"
    cl_root: Path = DEFAULT_DATA_ROOT / "cl"
    mount_root: Path = DEFAULT_DATA_ROOT / "mounts"
    state_file: Path = DEFAULT_DATA_ROOT / "state.json"
    unmount_command: tuple[str, ...] = field(default=DEFAULT_UNMOUNT_COMMAND)


def _config_files(home_dir: str | None) -> list[Path]:
    home = home_dir or os.path.expanduser("~")
    return [SYSTEM_CONFIG_PATH, Path(home) / USER_CONFIG_RELPATH]


def load_config(
    home_dir: str | None = None,
    config_path: str | os.PathLike[str] | None = None,
) -> LayermountConfig:
    """Load configuration from disk.

    Args:
        home_dir: Home directory whose user config file is consulted.
            Defaults to the current user's home.
        config_path: Read only this file instead of the system and user
            files.

    Returns:
        LayermountConfig with defaults for any value not set.

    Raises:
        configparser.Error: If a config file exists but is malformed.
    """
    parser = configparser.ConfigParser()
    files = [Path(config_path)] if config_path is not None else _config_files(home_dir)
    loaded = parser.read(files, encoding="utf-8")
    logger.debug("Loaded config from %s", loaded or "(defaults)")

    defaults = LayermountConfig()

    def _path(key: str, default: Path) -> Path:
        raw = parser.get("paths", key, fallback="").strip()
        return Path(os.path.expanduser(raw)) if raw else default

    raw_command = parser.get("unmount", "command", fallback="").strip()
    command = tuple(shlex.split(raw_command)) if raw_command else defaults.unmount_command

    return LayermountConfig(
        upper_root=_path("upper_root", defaults.upper_root),
        cl_root=_path("cl_root", defaults.cl_root),
        mount_root=_path("mount_root", defaults.mount_root),
        state_file=_path("state_file", defaults.state_file),
        unmount_command=command,
    )
