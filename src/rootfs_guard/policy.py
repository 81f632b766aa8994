"""Boolean policy flags read from environment-style strings.

Both flags are plain environment variables without the ``ROOTFS_GUARD_``
prefix so deployments can set them next to the rest of the container
configuration:

- ``ENFORCE_READ_ONLY``: a writable root filesystem fails startup instead of
  logging a warning.
- ``RUNNING_IN_CONTAINER``: treat the process as containerised even when the
  marker file and cgroup heuristics say otherwise.
"""

from __future__ import annotations

import os
from typing import Final

ENFORCE_READ_ONLY_ENV: Final = "ENFORCE_READ_ONLY"
RUNNING_IN_CONTAINER_ENV: Final = "RUNNING_IN_CONTAINER"

TRUE_LIKE_VALUES: Final = frozenset({"1", "true", "yes", "on"})


class FromEnvironment:
    """Marker for "argument omitted, read the environment"."""

    def __repr__(self) -> str:
        return "FROM_ENV"


FROM_ENV: Final = FromEnvironment()


def is_true_like(value: str | None) -> bool:
    """Return True for ``1``/``true``/``yes``/``on`` (any case, padded or not)."""
    if not value:
        return False
    return value.strip().lower() in TRUE_LIKE_VALUES


def _resolve(value: str | None | FromEnvironment, env_name: str) -> str | None:
    if isinstance(value, FromEnvironment):
        return os.environ.get(env_name)
    return value


def should_enforce_read_only_root_filesystem(
    value: str | None | FromEnvironment = FROM_ENV,
) -> bool:
    """Whether a writable container root filesystem must abort startup.

    Args:
        value: Raw flag value. When omitted, ``ENFORCE_READ_ONLY`` is read
            from the process environment. ``None`` means the flag is unset.
    """
    return is_true_like(_resolve(value, ENFORCE_READ_ONLY_ENV))


def should_assume_running_in_container(
    value: str | None | FromEnvironment = FROM_ENV,
) -> bool:
    """Whether container detection is overridden to always report True.

    Args:
        value: Raw flag value. When omitted, ``RUNNING_IN_CONTAINER`` is read
            from the process environment. ``None`` means the flag is unset.
    """
    return is_true_like(_resolve(value, RUNNING_IN_CONTAINER_ENV))
