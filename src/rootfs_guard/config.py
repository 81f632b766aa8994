"""rootfs-guard configuration management.

Configuration sources (in priority order):
1. Environment variables (ROOTFS_GUARD_ prefix)
2. Config file (rootfs-guard.yaml)
3. Defaults

The ENFORCE_READ_ONLY and RUNNING_IN_CONTAINER flags are not settings; they
are read by rootfs_guard.policy on every check.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CGROUP_MARKERS: tuple[str, ...] = (
    "docker",
    "kubepods",
    "containerd",
    "podman",
    "crio",
    "lxc",
)

DEFAULT_DATA_PATH = "/data"


class ProbeConfig(BaseModel):
    """Container detection probe configuration."""

    dockerenv_path: str = "/.dockerenv"
    # Init process first, then the current process
    cgroup_paths: list[str] = Field(
        default_factory=lambda: ["/proc/1/cgroup", "/proc/self/cgroup"]
    )
    cgroup_markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CGROUP_MARKERS)
    )
    # Appended to cgroup_markers, for runtimes not in the default list
    extra_cgroup_markers: list[str] = Field(default_factory=list)

    @property
    def all_cgroup_markers(self) -> list[str]:
        # Normalised (lower-cased, deduplicated) by CgroupProbe
        return [*self.cgroup_markers, *self.extra_cgroup_markers]


class MountConfig(BaseModel):
    """Mount table configuration."""

    mountinfo_path: str = "/proc/self/mountinfo"
    # Writable scratch location suggested in the remediation message
    data_path: str = DEFAULT_DATA_PATH


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["console", "json"] = "console"


class Settings(BaseSettings):
    """rootfs-guard settings."""

    model_config = SettingsConfigDict(
        env_prefix="ROOTFS_GUARD_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    probes: ProbeConfig = Field(default_factory=ProbeConfig)
    mounts: MountConfig = Field(default_factory=MountConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment wins over values passed in from the YAML file
        return env_settings, init_settings, file_secret_settings


def _load_config_file() -> dict:
    """Load configuration from YAML file if exists.

    Looks for config file in order:
    1. ROOTFS_GUARD_CONFIG_FILE environment variable
    2. ./rootfs-guard.yaml
    3. /etc/rootfs-guard/config.yaml
    """
    config_paths = [
        os.environ.get("ROOTFS_GUARD_CONFIG_FILE"),
        Path("rootfs-guard.yaml"),
        Path("/etc/rootfs-guard/config.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}

    return {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Environment variables override values from the YAML config file.
    """
    file_config = _load_config_file()
    return Settings(**file_config)
