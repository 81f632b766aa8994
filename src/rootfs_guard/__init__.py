"""Startup check for read-only container root filesystems.

Usage:
    from rootfs_guard import validate_container_security

    await validate_container_security()
"""

from rootfs_guard.detection import (
    CgroupProbe,
    ContainerDetector,
    ContainerProbe,
    MarkerFileProbe,
    OverrideProbe,
    ProbeResult,
    is_running_in_container,
)
from rootfs_guard.errors import (
    RootfsGuardError,
    RootMountNotFoundError,
    WritableRootFilesystemError,
)
from rootfs_guard.inspector import (
    READ_ONLY_REQUIRED_MESSAGE,
    ContainerRootFilesystemState,
    RootFilesystemInspector,
    enforce_read_only_root_filesystem,
    is_container_root_filesystem_read_only,
)
from rootfs_guard.mountinfo import MountEntry, is_root_filesystem_read_only
from rootfs_guard.policy import (
    should_assume_running_in_container,
    should_enforce_read_only_root_filesystem,
)
from rootfs_guard.startup import validate_container_security

__all__ = [
    # Detection
    "CgroupProbe",
    "ContainerDetector",
    "ContainerProbe",
    "MarkerFileProbe",
    "OverrideProbe",
    "ProbeResult",
    "is_running_in_container",
    # Errors
    "RootfsGuardError",
    "RootMountNotFoundError",
    "WritableRootFilesystemError",
    # Inspection
    "READ_ONLY_REQUIRED_MESSAGE",
    "ContainerRootFilesystemState",
    "RootFilesystemInspector",
    "enforce_read_only_root_filesystem",
    "is_container_root_filesystem_read_only",
    # Mount table
    "MountEntry",
    "is_root_filesystem_read_only",
    # Policy
    "should_assume_running_in_container",
    "should_enforce_read_only_root_filesystem",
    # Startup
    "validate_container_security",
]
