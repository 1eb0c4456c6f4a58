# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Tests for the state file persister."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from layermount import MountRecord, StateFormatError
from layermount.state import StatePersister


def _record(job_id: str, with_cl: bool = False) -> MountRecord:
    return MountRecord(
        job_id=job_id,
        mountpoint=Path("/mnt") / job_id,
        upper_id=f"{job_id}-upper",
        upper_dir=Path("/layers/upper") / f"{job_id}-upper",
        cl_id=f"{job_id}-cl" if with_cl else None,
        cl_dir=Path("/layers/cl") / f"{job_id}-cl" if with_cl else None,
    )


def test_missing_file_loads_empty(tmp_path: Path) -> None:
    assert StatePersister(tmp_path / "state.json").load() == []


def test_save_creates_parent_and_round_trips(tmp_path: Path) -> None:
    persister = StatePersister(tmp_path / "nested" / "dir" / "state.json")
    records = [_record("a", with_cl=True), _record("b")]

    persister.save(records)

    assert persister.load() == records


def test_optional_fields_are_omitted(tmp_path: Path) -> None:
    persister = StatePersister(tmp_path / "state.json")

    persister.save([_record("plain")])

    [entry] = json.loads(persister.path.read_text())["mounts"]
    assert entry == {
        "job_id": "plain",
        "mountpoint": "/mnt/plain",
        "upper_id": "plain-upper",
        "upper_dir": "/layers/upper/plain-upper",
    }


def test_save_replaces_previous_snapshot(tmp_path: Path) -> None:
    persister = StatePersister(tmp_path / "state.json")
    persister.save([_record("a"), _record("b")])

    persister.save([_record("b")])

    assert [r.job_id for r in persister.load()] == ["b"]
    # Only the state file remains; no temporary files are left behind.
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_failed_replace_removes_temporary_file(tmp_path: Path) -> None:
    # A non-empty directory at the target makes the final rename fail.
    target = tmp_path / "state.json"
    target.mkdir()
    (target / "keep").write_text("x")

    with pytest.raises(OSError):
        StatePersister(target).save([_record("a")])

    assert list(tmp_path.glob(".state.json.*.tmp")) == []
    assert sorted(p.name for p in tmp_path.iterdir()) == ["state.json"]
    assert (target / "keep").read_text() == "x"


@pytest.mark.parametrize(
    "content",
    [
        "{ not json",
        "[]",
        '{"mounts": "nope"}',
        '{"mounts": [{"job_id": "a"}]}',
        '{"mounts": [{"job_id": "a", "mountpoint": "/m", "upper_id": "u",'
        ' "upper_dir": "/u", "cl_id": "c"}]}',
        '{"mounts": [], "unexpected": 1}',
        "",
    ],
)
def test_malformed_file_raises(tmp_path: Path, content: str) -> None:
    path = tmp_path / "state.json"
    path.write_text(content)

    with pytest.raises(StateFormatError) as excinfo:
        StatePersister(path).load()

    assert excinfo.value.path == str(path)


def test_non_utf8_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(StateFormatError):
        StatePersister(path).load()
