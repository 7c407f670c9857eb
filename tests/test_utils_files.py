import os

import pytest

from src.utils.files import atomic_write


def test_atomic_write_creates_file_and_parents(tmp_path):
    target = tmp_path / "data" / "parks.json"
    with atomic_write(target) as f:
        f.write("공원")

    assert target.read_text(encoding="utf-8") == "공원"


def test_atomic_write_overwrites_existing(tmp_path):
    target = tmp_path / "overwrite.txt"
    target.write_text("Old", encoding="utf-8")

    with atomic_write(target) as f:
        f.write("New")

    assert target.read_text(encoding="utf-8") == "New"


def test_atomic_write_cleanup_on_error(tmp_path):
    target = tmp_path / "fail.txt"
    target.write_text("Old", encoding="utf-8")

    with pytest.raises(RuntimeError):
        with atomic_write(target) as f:
            f.write("Start")
            raise RuntimeError("Boom")

    assert target.read_text(encoding="utf-8") == "Old"
    assert len(list(tmp_path.glob("fail.txt.*.tmp"))) == 0


def test_atomic_write_permissions(tmp_path):
    if os.name == "nt":
        pytest.skip("Permissions not fully supported on Windows")

    target = tmp_path / "perms.txt"
    with atomic_write(target, permissions=0o600) as f:
        f.write("secret")

    assert (target.stat().st_mode & 0o777) == 0o600
