"""Parser for /proc/self/mountinfo.

Each line has two space-separated segments joined by `` - ``::

    36 28 0:32 / / ro,relatime shared:1 - overlay overlay rw,lowerdir=/foo
    |  |  |    | | |           |           |       |       |
    id parent  | | mount opts  tags        fstype  source  super opts
          major:minor root / mount point

Only the root mount (mount point ``/``) is of interest here.
"""

from __future__ import annotations

from dataclasses import dataclass

from rootfs_guard.errors import RootMountNotFoundError

SEPARATOR = " - "

# Field positions within the left (mount) segment
MOUNT_POINT_FIELD = 4
MOUNT_OPTIONS_FIELD = 5

# Field positions within the right (filesystem) segment
FS_TYPE_FIELD = 0
SOURCE_FIELD = 1
SUPER_OPTIONS_FIELD = 2


@dataclass(frozen=True)
class MountEntry:
    """Options of a single mountinfo line."""

    mount_point: str
    mount_options: frozenset[str]
    super_options: frozenset[str]
    fs_type: str = ""
    source: str = ""

    @property
    def is_read_only(self) -> bool:
        # Either the per-mount or the superblock flags can carry "ro".
        return "ro" in self.mount_options or "ro" in self.super_options


def _field(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


def _options(raw: str) -> frozenset[str]:
    return frozenset(raw.split(","))


def find_root_mount_line(mountinfo: str) -> str | None:
    """Return the first stripped line whose mount point is ``/``, if any."""
    for raw_line in mountinfo.split("\n"):
        line = raw_line.strip()
        if not line or SEPARATOR not in line:
            continue
        left, _, _ = line.partition(SEPARATOR)
        if _field(left.split(" "), MOUNT_POINT_FIELD) == "/":
            return line
    return None


def parse_root_mount_entry(mountinfo: str) -> MountEntry:
    """Parse the root mount line out of a mountinfo text blob.

    Raises:
        RootMountNotFoundError: No line has ``/`` as its mount point.
    """
    line = find_root_mount_line(mountinfo)
    if line is None:
        raise RootMountNotFoundError()

    left, _, right = line.partition(SEPARATOR)
    mount_fields = left.split(" ")
    fs_fields = right.split(" ")
    return MountEntry(
        mount_point=_field(mount_fields, MOUNT_POINT_FIELD),
        mount_options=_options(_field(mount_fields, MOUNT_OPTIONS_FIELD)),
        super_options=_options(_field(fs_fields, SUPER_OPTIONS_FIELD)),
        fs_type=_field(fs_fields, FS_TYPE_FIELD),
        source=_field(fs_fields, SOURCE_FIELD),
    )


def is_root_filesystem_read_only(mountinfo: str) -> bool:
    """Return True when the root mount carries the ``ro`` option."""
    return parse_root_mount_entry(mountinfo).is_read_only
