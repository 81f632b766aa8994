"""Test configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from rootfs_guard.config import Settings, get_settings

ROOT_RW_MOUNTINFO = "36 28 0:32 / / rw,relatime - overlay overlay rw,lowerdir=/foo"
ROOT_RO_MOUNTINFO = "36 28 0:32 / / ro,relatime - overlay overlay rw,lowerdir=/foo"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the host environment out of the tests."""
    for name in ("ENFORCE_READ_ONLY", "RUNNING_IN_CONTAINER", "ROOTFS_GUARD_CONFIG_FILE"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_proc(tmp_path: Path) -> Path:
    """Empty directory standing in for / and /proc."""
    root = tmp_path / "fakeroot"
    (root / "proc" / "1").mkdir(parents=True)
    (root / "proc" / "self").mkdir(parents=True)
    return root


@pytest.fixture
def test_settings(fake_proc: Path) -> Settings:
    """Settings pointing every probe and the mount table into fake_proc."""
    return Settings(
        probes={
            "dockerenv_path": str(fake_proc / ".dockerenv"),
            "cgroup_paths": [
                str(fake_proc / "proc" / "1" / "cgroup"),
                str(fake_proc / "proc" / "self" / "cgroup"),
            ],
        },
        mounts={
            "mountinfo_path": str(fake_proc / "proc" / "self" / "mountinfo"),
            "data_path": "/data",
        },
    )
