# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mount records and the persisted state document."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MountRecord(BaseModel):
    """One active job mount.

    Records are immutable; a new mount for the same job produces a new
    record rather than modifying the old one.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    job_id: str = Field(min_length=1)
    mountpoint: Path
    upper_id: str = Field(min_length=1)
    upper_dir: Path
    cl_id: str | None = None
    cl_dir: Path | None = None

    @model_validator(mode="after")
    def check_cl_pair(self) -> MountRecord:
        if (self.cl_id is None) != (self.cl_dir is None):
            raise ValueError("cl_id and cl_dir must be set together")
        return self


class MountState(BaseModel):
    """The state file: every mount that was active at the last persist."""

    model_config = ConfigDict(extra="forbid")

    mounts: list[MountRecord] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, exclude_none=True) + "\n"
