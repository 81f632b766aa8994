"""Boot-time container security validation.

Call validate_container_security() once before the host application starts
its work. With ENFORCE_READ_ONLY enabled a writable container root aborts
startup; otherwise it is reported as a warning.
"""

from __future__ import annotations

import structlog

from rootfs_guard.errors import WritableRootFilesystemError
from rootfs_guard.inspector import ContainerRootFilesystemState, RootFilesystemInspector
from rootfs_guard.policy import (
    ENFORCE_READ_ONLY_ENV,
    FROM_ENV,
    FromEnvironment,
    should_enforce_read_only_root_filesystem,
)

logger = structlog.get_logger()

DEPRECATION_NOTICE = "This will become a required default in the next major release."


async def validate_container_security(
    *,
    enforce: str | None | FromEnvironment = FROM_ENV,
    inspector: RootFilesystemInspector | None = None,
) -> ContainerRootFilesystemState:
    """Check the container root filesystem and apply the enforcement policy.

    Args:
        enforce: Raw ENFORCE_READ_ONLY value; read from the environment when
            omitted.
        inspector: Inspector to use; built from settings when omitted.

    Returns:
        The inspected state, also when it was only reported as a warning.

    Raises:
        WritableRootFilesystemError: Writable root in strict mode.
    """
    inspector = inspector or RootFilesystemInspector.from_settings()
    try:
        state = await inspector.is_container_root_filesystem_read_only()
        if state.is_violation:
            message = f"{inspector.read_only_required_message} {DEPRECATION_NOTICE}"
            if should_enforce_read_only_root_filesystem(enforce):
                logger.error("container_security.read_only_required", message=message)
                raise WritableRootFilesystemError(message)
            logger.warning(
                "container_security.compatibility_mode",
                message=(
                    f"{message} Compatibility mode is active because "
                    f"{ENFORCE_READ_ONLY_ENV} is not enabled."
                ),
            )
        else:
            logger.info(
                "container_security.validated",
                is_container=state.is_container,
                is_read_only=state.is_read_only,
            )
        return state
    except Exception as e:
        logger.error(
            "container_security.validation_failed",
            message="Container security validation failed.",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
