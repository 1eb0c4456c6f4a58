# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Tests for unmount outcome classification and the tool runner."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from layermount import UnmountCoordinator, UnmountError, UnmountStatus
from layermount.unmount import classify_unmount


@pytest.mark.parametrize(
    ("returncode", "diagnostic", "expected"),
    [
        (0, "", UnmountStatus.SUCCESS),
        (0, "some chatter", UnmountStatus.SUCCESS),
        (1, "fusermount: failed to unmount /m: Invalid argument", UnmountStatus.ALREADY_UNMOUNTED),
        (1, "umount: /m: not mounted", UnmountStatus.ALREADY_UNMOUNTED),
        (1, "UMOUNT: /m: NOT MOUNTED", UnmountStatus.ALREADY_UNMOUNTED),
        (1, "fusermount: entry for /m not found in /etc/mtab", UnmountStatus.ALREADY_UNMOUNTED),
        (1, "fusermount: failed to unmount /m: Device or resource busy", UnmountStatus.FAILED),
        (1, "", UnmountStatus.FAILED),
    ],
)
def test_classify_unmount(returncode: int, diagnostic: str, expected: UnmountStatus) -> None:
    assert classify_unmount(returncode, diagnostic).status is expected


def test_failed_outcome_carries_diagnostic() -> None:
    outcome = classify_unmount(1, "  Device or resource busy\n")

    assert outcome.message == "Device or resource busy"
    assert not outcome.ok


def test_failed_outcome_without_diagnostic_mentions_status() -> None:
    assert classify_unmount(7, "").message == "exited with status 7"


def test_already_unmounted_counts_as_ok() -> None:
    assert classify_unmount(1, "not mounted").ok


async def test_coordinator_success(fake_unmount_tool: Any, tool_calls: Any) -> None:
    coordinator = fake_unmount_tool(0)

    outcome = await coordinator.unmount(Path("/mnt/job1"))

    assert outcome.status is UnmountStatus.SUCCESS
    assert tool_calls(coordinator) == ["-u /mnt/job1"]


async def test_coordinator_not_mounted(fake_unmount_tool: Any) -> None:
    coordinator = fake_unmount_tool(1, "fusermount: entry for /mnt/job1 not found in /etc/mtab")

    outcome = await coordinator.unmount(Path("/mnt/job1"))

    assert outcome.status is UnmountStatus.ALREADY_UNMOUNTED


async def test_coordinator_other_failure_is_returned_not_raised(
    fake_unmount_tool: Any, caplog: pytest.LogCaptureFixture
) -> None:
    coordinator = fake_unmount_tool(1, "Device or resource busy")

    with caplog.at_level("WARNING", logger="layermount.unmount"):
        outcome = await coordinator.unmount(Path("/mnt/job1"))

    assert outcome.status is UnmountStatus.FAILED
    assert outcome.message == "Device or resource busy"
    assert "Device or resource busy" in caplog.text


async def test_coordinator_missing_tool_raises(tmp_path: Path) -> None:
    coordinator = UnmountCoordinator([str(tmp_path / "missing")])

    with pytest.raises(UnmountError):
        await coordinator.unmount(Path("/mnt/job1"))


def test_empty_command_rejected() -> None:
    with pytest.raises(ValueError):
        UnmountCoordinator([])
