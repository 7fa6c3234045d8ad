"""Session capability, per-context registry and ambient access."""

from parallel_harness.session.base import (
    Session,
    SessionConfig,
    SessionFactory,
    WindowState,
    session_config_from_env,
)
from parallel_harness.session.registry import ResourceRegistry

__all__ = [
    "Session",
    "SessionConfig",
    "SessionFactory",
    "WindowState",
    "session_config_from_env",
    "ResourceRegistry",
]
