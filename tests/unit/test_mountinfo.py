"""Unit tests for the mountinfo parser."""

from __future__ import annotations

import pytest

from rootfs_guard.errors import RootMountNotFoundError
from rootfs_guard.mountinfo import (
    find_root_mount_line,
    is_root_filesystem_read_only,
    parse_root_mount_entry,
)
from tests.conftest import ROOT_RO_MOUNTINFO, ROOT_RW_MOUNTINFO

pytestmark = pytest.mark.unit

# Trimmed from a real container
DOCKER_MOUNTINFO = """\
1038 1037 0:50 / /proc rw,nosuid,nodev,noexec,relatime - proc proc rw
612 560 0:41 / / ro,relatime master:312 - overlay overlay rw,lowerdir=/var/lib/docker/overlay2/l/A:/var/lib/docker/overlay2/l/B,upperdir=/var/lib/docker/overlay2/x/diff
1039 612 0:51 / /dev rw,nosuid - tmpfs tmpfs rw,size=65536k,mode=755
1045 612 8:1 /var/lib/docker/volumes/data/_data /data rw,relatime - ext4 /dev/sda1 rw
"""


class TestIsRootFilesystemReadOnly:
    """Classification of the root mount."""

    def test_ro_mount_option(self):
        """ro in the per-mount options makes the root read-only."""
        assert is_root_filesystem_read_only(ROOT_RO_MOUNTINFO) is True

    def test_rw_mount(self):
        """rw in both option sets is writable."""
        assert is_root_filesystem_read_only(ROOT_RW_MOUNTINFO) is False

    def test_ro_super_option(self):
        """ro in the superblock options is enough on its own."""
        line = "36 28 0:32 / / rw,relatime - ext4 /dev/vda1 ro,errors=remount-ro"
        assert is_root_filesystem_read_only(line) is True

    def test_ro_substring_is_not_ro(self):
        """Options are matched as whole tokens, not substrings."""
        line = "36 28 0:32 / / rw,relatime - ext4 /dev/vda1 rw,errors=remount-ro"
        assert is_root_filesystem_read_only(line) is False

    def test_real_container_mountinfo(self):
        """The root line is found among other mounts, with optional tags."""
        assert is_root_filesystem_read_only(DOCKER_MOUNTINFO) is True

    def test_first_root_line_wins(self):
        """When / is listed twice, the first entry decides."""
        text = "\n".join([ROOT_RW_MOUNTINFO, ROOT_RO_MOUNTINFO])
        assert is_root_filesystem_read_only(text) is False

    def test_surrounding_whitespace_and_blank_lines(self):
        """Lines are trimmed and blank lines skipped."""
        text = f"\n\n   {ROOT_RO_MOUNTINFO}   \n\n"
        assert is_root_filesystem_read_only(text) is True

    def test_missing_root_entry(self):
        """No line with mount point / raises a LookupError."""
        with pytest.raises(LookupError, match="Unable to locate root mount entry"):
            is_root_filesystem_read_only("11 22 0:99 /tmp /tmp rw - tmpfs tmpfs rw")

    def test_missing_root_entry_error_type(self):
        with pytest.raises(RootMountNotFoundError):
            is_root_filesystem_read_only("")

    def test_line_without_separator_is_ignored(self):
        """A root-looking line without ' - ' is not a candidate."""
        with pytest.raises(RootMountNotFoundError):
            is_root_filesystem_read_only("36 28 0:32 / / ro,relatime overlay overlay ro")

    def test_root_path_field_is_not_mount_point(self):
        """Field 3 (root within the source fs) being / does not count."""
        with pytest.raises(RootMountNotFoundError):
            is_root_filesystem_read_only("36 28 0:32 / /mnt ro - ext4 /dev/sda1 ro")


class TestParseRootMountEntry:
    """Structured parse of the root line."""

    def test_fields(self):
        entry = parse_root_mount_entry(ROOT_RO_MOUNTINFO)

        assert entry.mount_point == "/"
        assert entry.mount_options == frozenset({"ro", "relatime"})
        assert entry.super_options == frozenset({"rw", "lowerdir=/foo"})
        assert entry.fs_type == "overlay"
        assert entry.source == "overlay"
        assert entry.is_read_only is True

    def test_truncated_right_segment(self):
        """Missing superblock options parse to an empty option."""
        entry = parse_root_mount_entry("36 28 0:32 / / rw - overlay")

        assert entry.super_options == frozenset({""})
        assert entry.source == ""
        assert entry.is_read_only is False

    def test_find_root_mount_line_returns_stripped_line(self):
        assert find_root_mount_line(f"  {ROOT_RW_MOUNTINFO}\n") == ROOT_RW_MOUNTINFO

    def test_find_root_mount_line_none(self):
        assert find_root_mount_line("11 22 0:99 /tmp /tmp rw - tmpfs tmpfs rw") is None
