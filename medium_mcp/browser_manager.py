"""Singleton browser manager for Playwright.

Owns at most one live Chromium process.  Extraction calls borrow it in
headless mode through ``open_page``; the interactive login flow switches it to
headful mode and keeps one "active" context open until ``save_login``.
Switching modes always tears the old process down first.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from medium_mcp import session_store
from medium_mcp.config import CONTEXT_OPTIONS, LAUNCH_ARGS, SIGNIN_URL, TIMEOUTS
from medium_mcp.utils.errors import MediumError

logger = logging.getLogger(__name__)

# JavaScript to mask Playwright/automation fingerprints
_STEALTH_JS = """
() => {
    Object.defineProperty(navigator, 'webdriver', { get: () => false });
    Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
    Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
    window.chrome = { runtime: {} };
}
"""

# Cloudflare / bot-wall page titles
_CHALLENGE_TITLES = ("just a moment", "attention required", "checking your browser")


class BrowserManager:
    """Singleton manager for the shared Playwright browser."""

    _instance: Optional["BrowserManager"] = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._playwright = None
            instance._browser = None
            instance._headless = True
            instance._login_context = None
            instance._lock = asyncio.Lock()
            cls._instance = instance
        return cls._instance

    @classmethod
    async def get_instance(cls) -> "BrowserManager":
        """Get or create the singleton instance."""
        return cls()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    @property
    def headless(self) -> bool:
        return self._headless

    async def acquire(self, headless: bool = True) -> Browser:
        """Return a live browser in the requested mode, relaunching if needed."""
        async with self._lock:
            return await self._acquire(headless)

    async def release(self) -> None:
        """Close the login context, the browser and the driver. Never raises."""
        async with self._lock:
            await self._release()

    async def _acquire(self, headless: bool) -> Browser:
        if self.is_running() and self._headless == headless:
            return self._browser

        await self._release()

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=headless, args=LAUNCH_ARGS
            )
        except Exception as e:
            logger.error("Browser launch failed (headless=%s): %s", headless, e)
            await self._release()
            raise MediumError.browser_launch(e) from e

        self._headless = headless
        logger.info("Browser launched (%s mode)", "headless" if headless else "headed")
        return self._browser

    async def _release(self) -> None:
        if self._login_context is not None:
            try:
                await self._login_context.close()
            except Exception as e:
                logger.debug("Login context already closed: %s", e)
            self._login_context = None

        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.debug("Browser already closed: %s", e)
            self._browser = None
            logger.info("Browser closed")

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.debug("Playwright driver already stopped: %s", e)
            self._playwright = None

    async def _new_context(self, browser: Browser, **overrides) -> BrowserContext:
        context = await browser.new_context(**{**CONTEXT_OPTIONS, **overrides})
        await context.add_init_script(_STEALTH_JS)
        return context

    # ------------------------------------------------------------------
    # Page acquisition
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def open_page(
        self,
        url: str,
        *,
        use_session: bool = False,
        ready_selector: str = "article",
        navigation_timeout_ms: int = TIMEOUTS.navigation,
        selector_timeout_ms: int = TIMEOUTS.selector,
    ) -> AsyncIterator[Page]:
        """Open ``url`` in a fresh headless context and yield the page.

        Navigation timeouts raise; a missing ``ready_selector`` only logs a
        warning.  The context is closed on every exit path.
        """
        browser = await self.acquire(headless=True)

        overrides = {}
        if use_session and session_store.exists():
            overrides["storage_state"] = str(session_store.path())
        context = await self._new_context(browser, **overrides)

        try:
            page = await context.new_page()
            await page.goto(url, wait_until="domcontentloaded", timeout=navigation_timeout_ms)

            if ready_selector:
                try:
                    await page.wait_for_selector(ready_selector, timeout=selector_timeout_ms)
                except Exception:
                    logger.warning("Selector %r not found on %s, continuing", ready_selector, url)

            await _warn_if_challenge(page, url)
            yield page
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.debug("Context close failed for %s: %s", url, e)

    # ------------------------------------------------------------------
    # Interactive login
    # ------------------------------------------------------------------

    async def open_interactive_login(self) -> str:
        """Open a visible browser on the Medium sign-in page."""
        async with self._lock:
            await self._release()
            browser = await self._acquire(headless=False)
            context = await self._new_context(browser)
            try:
                page = await context.new_page()
                await page.goto(SIGNIN_URL, wait_until="domcontentloaded", timeout=TIMEOUTS.login)
            except Exception as e:
                logger.error("Failed to open the sign-in page: %s", e)
                await self._release()
                raise MediumError.browser_launch(e) from e
            self._login_context = context

        logger.info("Login window opened at %s", SIGNIN_URL)
        return (
            "Browser opened for login. Please complete the login process in the "
            "browser window, then use 'save_login' tool to save your session."
        )

    async def persist_login_state(self) -> str:
        """Save the login context's storage state and close the browser."""
        async with self._lock:
            if not self.is_running():
                raise MediumError.no_active_session()
            if self._login_context is None:
                raise MediumError.no_active_session(
                    "No login window is open. Please run 'login' first."
                )

            try:
                state = await self._login_context.storage_state()
                target = session_store.write(state)
            except Exception as e:
                logger.error("Failed to save login state: %s", e)
                raise MediumError.no_active_session(
                    f"Failed to save login state: {e}. Please run 'login' again.", cause=e
                ) from e
            finally:
                await self._release()

        return (
            f"Login state saved to {target}. You can now use 'read_article' "
            "to access member-only content."
        )

    async def clear_login_state(self) -> str:
        if session_store.delete():
            return "Login state cleared successfully."
        return "No login state found."

    def is_logged_in(self) -> bool:
        return session_store.exists()


def is_challenge_title(title: Optional[str]) -> bool:
    """True for Cloudflare / bot-wall interstitial titles."""
    title = (title or "").strip().lower()
    return any(signal in title for signal in _CHALLENGE_TITLES)


async def _warn_if_challenge(page: Page, url: str) -> None:
    try:
        title = await page.title()
    except Exception:
        return
    if is_challenge_title(title):
        logger.warning("Bot challenge page detected at %s (title=%r)", url, title)
