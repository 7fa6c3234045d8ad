"""Session capability boundary: config, session handle and factory."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from parallel_harness import config
from parallel_harness.exceptions import ConfigurationError


class WindowState(Enum):
    MAXIMIZED = "maximized"
    DEFAULT = "default"


@dataclass(frozen=True)
class SessionConfig:
    """Options used to open one browser session."""

    browser_kind: str = config.DEFAULT_BROWSER
    implicit_wait_millis: int = 0
    window_state: WindowState = WindowState.DEFAULT
    headless: bool = True

    def __post_init__(self):
        if self.browser_kind not in config.SUPPORTED_BROWSERS:
            raise ConfigurationError(
                f"Unsupported browser kind '{self.browser_kind}' "
                f"(expected one of {', '.join(config.SUPPORTED_BROWSERS)})"
            )
        if self.implicit_wait_millis < 0:
            raise ConfigurationError(
                f"implicit_wait_millis must be >= 0, got {self.implicit_wait_millis}"
            )
        if not isinstance(self.window_state, WindowState):
            raise ConfigurationError(f"Invalid window state {self.window_state!r}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SessionConfig":
        """Build a config from camelCase or snake_case keys."""

        def pick(*keys, default=None):
            for key in keys:
                if key in mapping and mapping[key] is not None:
                    return mapping[key]
            return default

        window_state = pick("windowState", "window_state", default="default")
        try:
            window_state = WindowState(str(window_state).lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown window state '{window_state}' (expected maximized|default)"
            ) from None
        try:
            wait = int(pick("implicitWaitMillis", "implicit_wait_millis", default=0))
        except (TypeError, ValueError):
            raise ConfigurationError("implicitWaitMillis must be an integer") from None

        return cls(
            browser_kind=str(
                pick("browserKind", "browser_kind", default=config.DEFAULT_BROWSER)
            ).lower(),
            implicit_wait_millis=wait,
            window_state=window_state,
            headless=bool(pick("headless", default=True)),
        )


def session_config_from_env() -> SessionConfig:
    """Read session options from HARNESS_* environment variables."""
    return SessionConfig.from_mapping(
        {
            "browserKind": config.get_env(config.ENV_BROWSER),
            "implicitWaitMillis": config.get_env(config.ENV_IMPLICIT_WAIT_MS),
            "windowState": config.get_env(config.ENV_WINDOW_STATE),
            "headless": config.get_bool_env(config.ENV_HEADLESS, True),
        }
    )


class Session:
    """An exclusive browser session owned by one execution context."""

    def navigate(self, url: str) -> None:
        raise NotImplementedError

    def snapshot(self) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class SessionFactory:
    """Opens sessions; ``open`` is called on the owning context's thread."""

    def open(self, session_config: Optional[SessionConfig] = None) -> Session:
        raise NotImplementedError
