# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest configuration and shared fixtures for layermount tests."""

from __future__ import annotations

import stat
from collections.abc import Callable
from pathlib import Path

import pytest

from layermount import MountLifecycleManager, PathConfig, UnmountCoordinator


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ---------------------------------------------------------------------------
# Fake unmount tools
# ---------------------------------------------------------------------------

FakeToolFactory = Callable[..., UnmountCoordinator]


@pytest.fixture
def fake_unmount_tool(tmp_path: Path) -> FakeToolFactory:
    """Build an UnmountCoordinator backed by a tiny shell script.

    The script sleeps *delay* seconds, prints *stderr* to standard
    error and exits with *status*.  Every invocation first appends its
    arguments to ``calls.log`` next to the script, so tests can see what
    was unmounted and whether the tool is still running.
    """
    counter = 0

    def _make(status: int = 0, stderr: str = "", delay: float = 0) -> UnmountCoordinator:
        nonlocal counter
        counter += 1
        tool_dir = tmp_path / f"tool{counter}"
        tool_dir.mkdir()
        script = tool_dir / "fake-fusermount"
        log = tool_dir / "calls.log"
        script.write_text(
            "#!/bin/sh\n"
            f'echo "$@" >> "{log}"\n'
            f"sleep {delay}\n"
            f"printf '%s\\n' '{stderr}' >&2\n"
            f"exit {status}\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return UnmountCoordinator([str(script), "-u"])

    return _make


def _read_calls(coordinator: UnmountCoordinator) -> list[str]:
    log = Path(coordinator.command[0]).parent / "calls.log"
    if not log.exists():
        return []
    return log.read_text().splitlines()


@pytest.fixture
def tool_calls() -> Callable[[UnmountCoordinator], list[str]]:
    """Lines logged by a fake unmount tool, one per invocation."""
    return _read_calls


# ---------------------------------------------------------------------------
# Manager fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def paths(tmp_path: Path) -> PathConfig:
    return PathConfig(
        upper_root=tmp_path / "upper",
        cl_root=tmp_path / "cl",
        mount_root=tmp_path / "mnt",
        state_file=tmp_path / "state.json",
    )


@pytest.fixture
def unmounter(fake_unmount_tool: FakeToolFactory) -> UnmountCoordinator:
    return fake_unmount_tool(0)


@pytest.fixture
def manager(paths: PathConfig, unmounter: UnmountCoordinator) -> MountLifecycleManager:
    return MountLifecycleManager(paths, unmounter=unmounter)
