"""Root filesystem inspection for containerised processes.

Outside a container the check is vacuously satisfied and the mount table is
never read. Inside one, /proc/self/mountinfo must be readable: a read failure
there propagates to the caller unchanged.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from rootfs_guard.config import DEFAULT_DATA_PATH, get_settings
from rootfs_guard.detection import ContainerDetector
from rootfs_guard.errors import WritableRootFilesystemError
from rootfs_guard.mountinfo import is_root_filesystem_read_only
from rootfs_guard.policy import FROM_ENV

if TYPE_CHECKING:
    from rootfs_guard.config import Settings
    from rootfs_guard.policy import FromEnvironment

logger = structlog.get_logger()


def read_only_required_message(data_path: str = DEFAULT_DATA_PATH) -> str:
    """Remediation message for a writable container root filesystem."""
    return (
        "Container root filesystem is writable. Run with --read-only "
        "(or read_only: true in docker-compose) and mount "
        f"{data_path} as writable tmpfs/volume."
    )


READ_ONLY_REQUIRED_MESSAGE = read_only_required_message()


@dataclass(frozen=True)
class ContainerRootFilesystemState:
    """Result of a single inspection.

    is_read_only is always True when is_container is False.
    """

    is_container: bool
    is_read_only: bool

    @property
    def is_violation(self) -> bool:
        return self.is_container and not self.is_read_only


class RootFilesystemInspector:
    """Combines container detection with mount table classification."""

    def __init__(
        self,
        detector: ContainerDetector,
        *,
        mountinfo_path: str | Path = "/proc/self/mountinfo",
        data_path: str = DEFAULT_DATA_PATH,
    ) -> None:
        self._detector = detector
        self._mountinfo_path = Path(mountinfo_path)
        self._data_path = data_path

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        running_in_container: str | None | FromEnvironment = FROM_ENV,
    ) -> RootFilesystemInspector:
        settings = settings or get_settings()
        return cls(
            ContainerDetector.from_settings(
                settings, running_in_container=running_in_container
            ),
            mountinfo_path=settings.mounts.mountinfo_path,
            data_path=settings.mounts.data_path,
        )

    @property
    def read_only_required_message(self) -> str:
        return read_only_required_message(self._data_path)

    async def _read_mountinfo(self) -> str:
        return await asyncio.to_thread(self._mountinfo_path.read_text, encoding="utf-8")

    async def is_container_root_filesystem_read_only(self) -> ContainerRootFilesystemState:
        """Report whether we run in a container and whether its root is read-only.

        Raises:
            OSError: The mount table could not be read inside a container.
            RootMountNotFoundError: The mount table has no root entry.
        """
        if not await self._detector.is_running_in_container():
            return ContainerRootFilesystemState(is_container=False, is_read_only=True)

        mountinfo = await self._read_mountinfo()
        state = ContainerRootFilesystemState(
            is_container=True,
            is_read_only=is_root_filesystem_read_only(mountinfo),
        )
        logger.debug(
            "container_security.root_filesystem",
            mountinfo_path=str(self._mountinfo_path),
            is_read_only=state.is_read_only,
        )
        return state

    async def enforce_read_only_root_filesystem(self) -> None:
        """Raise WritableRootFilesystemError if the container root is writable."""
        state = await self.is_container_root_filesystem_read_only()
        if state.is_violation:
            raise WritableRootFilesystemError(self.read_only_required_message)


async def is_container_root_filesystem_read_only(
    *,
    settings: Settings | None = None,
    running_in_container: str | None | FromEnvironment = FROM_ENV,
) -> ContainerRootFilesystemState:
    """Inspect the current process using configured paths."""
    inspector = RootFilesystemInspector.from_settings(
        settings, running_in_container=running_in_container
    )
    return await inspector.is_container_root_filesystem_read_only()


async def enforce_read_only_root_filesystem(
    *,
    settings: Settings | None = None,
    running_in_container: str | None | FromEnvironment = FROM_ENV,
) -> None:
    """Fail when running in a container with a writable root filesystem."""
    inspector = RootFilesystemInspector.from_settings(
        settings, running_in_container=running_in_container
    )
    await inspector.enforce_read_only_root_filesystem()
