"""Browser session capability backed by Playwright's sync API.

Each session starts its own Playwright driver. The sync API is bound to
the thread that started it, so a session must be opened, used and
closed from its owning execution context's thread.
"""

from typing import Optional

from playwright.sync_api import Error as PlaywrightError, sync_playwright

from parallel_harness import config
from parallel_harness.exceptions import ResourceTeardownError, SessionOpenError
from parallel_harness.logging_config import get_logger
from parallel_harness.retry import exponential_backoff
from parallel_harness.session.base import (
    Session,
    SessionConfig,
    SessionFactory,
    WindowState,
)

logger = get_logger("session")


class PlaywrightSession(Session):
    """One isolated browser, browser context and page."""

    def __init__(self, playwright, browser, context, page):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self.page = page

    def navigate(self, url: str) -> None:
        self.page.goto(url)

    def snapshot(self) -> bytes:
        return self.page.screenshot(full_page=True)

    def close(self) -> None:
        """Close page context, browser and driver; every step is attempted."""
        errors = []
        for name, closer in (
            ("context", self._context.close),
            ("browser", self._browser.close),
            ("driver", self._playwright.stop),
        ):
            try:
                closer()
            except Exception as e:
                logger.warning(f"Error closing {name}: {e}")
                errors.append((name, e))
        if errors:
            name, first = errors[0]
            raise ResourceTeardownError(
                f"Session did not close cleanly ({len(errors)} step(s) failed, "
                f"first: {name}: {first})"
            ) from first


class PlaywrightSessionFactory(SessionFactory):
    """Opens :class:`PlaywrightSession` instances."""

    def __init__(self, default_config: Optional[SessionConfig] = None):
        self.default_config = default_config or SessionConfig()

    @exponential_backoff(
        max_attempts=config.SESSION_OPEN_ATTEMPTS,
        base_delay=config.SESSION_OPEN_BASE_DELAY,
        retry_on=(SessionOpenError,),
    )
    def open(self, session_config: Optional[SessionConfig] = None) -> PlaywrightSession:
        cfg = session_config or self.default_config
        maximized = cfg.window_state is WindowState.MAXIMIZED

        playwright = sync_playwright().start()
        try:
            launch_args = []
            if maximized and cfg.browser_kind == "chromium":
                launch_args.append("--start-maximized")
            browser_type = getattr(playwright, cfg.browser_kind)
            browser = browser_type.launch(headless=cfg.headless, args=launch_args)

            if maximized:
                context = browser.new_context(no_viewport=True)
            else:
                context = browser.new_context(viewport=dict(config.DEFAULT_VIEWPORT))
            page = context.new_page()
            if cfg.implicit_wait_millis:
                page.set_default_timeout(cfg.implicit_wait_millis)
        except PlaywrightError as e:
            playwright.stop()
            raise SessionOpenError(
                f"Could not open {cfg.browser_kind} session: {e}"
            ) from e

        logger.debug(
            f"Opened {cfg.browser_kind} session",
            extra={
                "browser": cfg.browser_kind,
                "window_state": cfg.window_state.value,
                "headless": cfg.headless,
            },
        )
        return PlaywrightSession(playwright, browser, context, page)
