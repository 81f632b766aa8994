"""Error types raised by rootfs-guard."""

from __future__ import annotations


class RootfsGuardError(Exception):
    """Base class for rootfs-guard errors."""


class RootMountNotFoundError(RootfsGuardError, LookupError):
    """The mount table has no entry whose mount point is ``/``."""

    def __init__(
        self,
        message: str = "Unable to locate root mount entry in /proc/self/mountinfo",
    ) -> None:
        super().__init__(message)


class WritableRootFilesystemError(RootfsGuardError, RuntimeError):
    """Running inside a container whose root filesystem is writable."""
