# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Durable storage of the active mount set.

The state file is the recovery source after a restart, so a file that
cannot be read is an error: returning an empty set would make the
manager forget mounts that are still live.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from .errors import StateFormatError
from .records import MountRecord, MountState

logger = logging.getLogger(__name__)


class StatePersister:
    """Reads and writes the JSON state document."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[MountRecord]:
        """Read all persisted mount records.

        Returns:
            The records in file order, or an empty list if the file does
            not exist yet.

        Raises:
            StateFormatError: If the file exists but is not a valid state
                document.
            OSError: If the file cannot be read.
        """
        if not self._path.exists():
            logger.debug("No state file at %s, starting empty", self._path)
            return []

        try:
            raw = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StateFormatError(
                f"State file {self._path} is not valid UTF-8: {e}", str(self._path)
            ) from e

        try:
            state = MountState.model_validate_json(raw)
        except ValidationError as e:
            raise StateFormatError(
                f"Failed to parse state file {self._path}: {e}", str(self._path)
            ) from e

        logger.info("Loaded %d mount(s) from %s", len(state.mounts), self._path)
        return list(state.mounts)

    def save(self, records: Iterable[MountRecord]) -> None:
        """Replace the state file with *records*.

        The document is written to a temporary file next to the target
        and renamed over it, so readers see either the old or the new
        snapshot.

        Raises:
            OSError: If the directory or file cannot be written.
        """
        data = MountState(mounts=list(records)).to_json()
        parent = self._path.parent
        parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=str(parent),
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise
