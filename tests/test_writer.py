import os
from pathlib import Path

import pytest

from slimeimporter.errors import ContainerWriteFailure
from slimeimporter.slime import write_slime_file


def test_writes_and_replaces(tmp_path):
    path = tmp_path / "world.slime"
    path.write_bytes(b"old")

    write_slime_file(path, b"new data")

    assert path.read_bytes() == b"new data"
    assert os.listdir(tmp_path) == ["world.slime"]


def test_creates_parent_directories(tmp_path):
    path = tmp_path / "a" / "b" / "world.slime"
    write_slime_file(path, b"x")
    assert path.read_bytes() == b"x"


def test_refuses_to_overwrite(tmp_path):
    path = tmp_path / "world.slime"
    path.write_bytes(b"old")

    with pytest.raises(ContainerWriteFailure):
        write_slime_file(path, b"new", overwrite=False)
    assert path.read_bytes() == b"old"


def test_failure_leaves_no_partial_file(tmp_path, monkeypatch):
    path = tmp_path / "world.slime"

    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail)

    with pytest.raises(ContainerWriteFailure, match="disk full"):
        write_slime_file(path, b"data")
    assert os.listdir(tmp_path) == []


def test_cleanup_failure_keeps_write_error(tmp_path, monkeypatch):
    path = tmp_path / "world.slime"

    def fail(src, dst):
        raise OSError("disk full")

    def locked(self, missing_ok=False):
        raise PermissionError("locked")

    monkeypatch.setattr(os, "replace", fail)
    monkeypatch.setattr(Path, "unlink", locked)

    with pytest.raises(ContainerWriteFailure, match="disk full"):
        write_slime_file(path, b"data")
    assert not path.exists()
