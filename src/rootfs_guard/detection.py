"""Container detection.

Detection is an ordered list of independent probes. Each probe answers with a
ProbeResult; the first CONFIRMED wins and INDETERMINATE counts as a "no".

Default order:
1. OverrideProbe: RUNNING_IN_CONTAINER is true-like (no filesystem access)
2. MarkerFileProbe: /.dockerenv exists
3. CgroupProbe: /proc/1/cgroup or /proc/self/cgroup names a container runtime
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from rootfs_guard.config import DEFAULT_CGROUP_MARKERS, get_settings
from rootfs_guard.policy import FROM_ENV, should_assume_running_in_container

if TYPE_CHECKING:
    from rootfs_guard.config import Settings
    from rootfs_guard.policy import FromEnvironment

logger = structlog.get_logger()


class ProbeResult(str, Enum):
    """Outcome of a single container probe."""

    CONFIRMED = "confirmed"
    NEGATIVE = "negative"
    INDETERMINATE = "indeterminate"


class ContainerProbe(ABC):
    """A single container detection signal."""

    name: str = "probe"

    @abstractmethod
    async def probe(self) -> ProbeResult:
        """Evaluate the signal. Must not raise for expected read failures."""
        ...


class OverrideProbe(ContainerProbe):
    """Explicit RUNNING_IN_CONTAINER override."""

    name = "override"

    def __init__(self, value: str | None | FromEnvironment = FROM_ENV) -> None:
        self._value = value

    async def probe(self) -> ProbeResult:
        if should_assume_running_in_container(self._value):
            return ProbeResult.CONFIRMED
        return ProbeResult.NEGATIVE


class MarkerFileProbe(ContainerProbe):
    """Presence of a marker file such as /.dockerenv. Contents are ignored."""

    name = "marker_file"

    def __init__(self, path: str | Path = "/.dockerenv") -> None:
        self._path = Path(path)

    async def probe(self) -> ProbeResult:
        try:
            exists = await asyncio.to_thread(self._path.exists)
        except OSError as e:
            logger.debug(
                "container_detection.marker_file.unreadable",
                path=str(self._path),
                error=str(e),
            )
            return ProbeResult.INDETERMINATE
        return ProbeResult.CONFIRMED if exists else ProbeResult.NEGATIVE


class CgroupProbe(ContainerProbe):
    """Container runtime names in process cgroup descriptions."""

    name = "cgroup"

    def __init__(
        self,
        paths: Sequence[str | Path] = ("/proc/1/cgroup", "/proc/self/cgroup"),
        markers: Iterable[str] = DEFAULT_CGROUP_MARKERS,
    ) -> None:
        self._paths = [Path(p) for p in paths]
        self._markers = tuple(dict.fromkeys(m.lower() for m in markers if m))

    @property
    def markers(self) -> tuple[str, ...]:
        return self._markers

    def contains_marker(self, cgroup_info: str) -> bool:
        lowered = cgroup_info.lower()
        return any(marker in lowered for marker in self._markers)

    async def probe(self) -> ProbeResult:
        any_read = False
        for path in self._paths:
            try:
                cgroup_info = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                # Expected outside containers and under restricted /proc
                logger.debug(
                    "container_detection.cgroup.unreadable",
                    path=str(path),
                    error=str(e),
                )
                continue
            any_read = True
            if self.contains_marker(cgroup_info):
                return ProbeResult.CONFIRMED
        return ProbeResult.NEGATIVE if any_read else ProbeResult.INDETERMINATE


class ContainerDetector:
    """Runs probes in order and reports whether we are in a container."""

    def __init__(self, probes: Sequence[ContainerProbe]) -> None:
        self._probes = list(probes)
        self._log = logger.bind(component="container_detector")

    @property
    def probes(self) -> list[ContainerProbe]:
        return list(self._probes)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        running_in_container: str | None | FromEnvironment = FROM_ENV,
    ) -> ContainerDetector:
        """Build the default override -> marker file -> cgroup chain."""
        settings = settings or get_settings()
        return cls(
            [
                OverrideProbe(running_in_container),
                MarkerFileProbe(settings.probes.dockerenv_path),
                CgroupProbe(
                    paths=settings.probes.cgroup_paths,
                    markers=settings.probes.all_cgroup_markers,
                ),
            ]
        )

    async def is_running_in_container(self) -> bool:
        for probe in self._probes:
            result = await probe.probe()
            if result is ProbeResult.CONFIRMED:
                self._log.debug("container_detection.confirmed", probe=probe.name)
                return True
            self._log.debug(
                "container_detection.probe",
                probe=probe.name,
                result=result.value,
            )
        return False


async def is_running_in_container(
    running_in_container: str | None | FromEnvironment = FROM_ENV,
    *,
    settings: Settings | None = None,
) -> bool:
    """Return True when the current process appears to run in a container."""
    detector = ContainerDetector.from_settings(
        settings, running_in_container=running_in_container
    )
    return await detector.is_running_in_container()
