"""
Browser control for the capture pipeline.

This module defines the PageDriver interface the crawl engine, stabilizer and
authenticator talk to, a Playwright-backed implementation of it, and the
BrowserSession that owns the browser lifecycle:

    async with BrowserSession(config) as session:
        await SessionPhaseController(session.driver, ...).run()

A single page is shared by both crawl phases so that cookies set during login
carry over into the authenticated crawl.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from sitesnap.browser_config import BrowserConfig
from sitesnap.links import ANCHOR_EXTRACTION_SCRIPT, anchors_from_elements
from sitesnap.models import Anchor

logger = logging.getLogger(__name__)


# Replaces IntersectionObserver so every observed element is reported visible
# immediately. Lazy-loading libraries then render their content eagerly.
FORCE_VISIBILITY_SCRIPT = """
() => {
    if (typeof window.IntersectionObserver !== 'function') {
        return false;
    }
    window.IntersectionObserver = class {
        constructor(callback) { this.callback = callback; }
        observe(element) {
            this.callback([{
                isIntersecting: true,
                intersectionRatio: 1,
                target: element,
                boundingClientRect: element.getBoundingClientRect(),
            }], this);
        }
        unobserve() {}
        disconnect() {}
        takeRecords() { return []; }
    };
    return true;
}
"""


class BrowserNotStartedError(RuntimeError):
    """Raised when a session is used outside its async context manager."""


class PageDriver(ABC):
    """Operations the pipeline needs from a browser page.

    All timeouts are in milliseconds. Any method may raise; callers decide
    whether a failure is fatal.
    """

    @property
    @abstractmethod
    def current_url(self) -> str:
        """URL of the document currently loaded."""

    @abstractmethod
    async def navigate(self, url: str, wait_until: str = "networkidle", timeout_ms: int = 60000) -> None:
        """Load ``url`` and wait for the given load condition."""

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run a JavaScript function in the page and return its result."""

    @abstractmethod
    async def wait_for_element(self, selector: str, visible: bool = True, timeout_ms: int = 10000) -> None:
        """Wait until an element matching ``selector`` is attached (and visible)."""

    @abstractmethod
    async def type_into(self, selector: str, text: str) -> None:
        """Type text into the element matching ``selector``."""

    @abstractmethod
    async def click(self, selector: str) -> None:
        """Click the element matching ``selector``."""

    @abstractmethod
    async def wait_for_navigation_settled(self, timeout_ms: int = 60000) -> None:
        """Wait for a navigation triggered by the last click to settle."""

    @abstractmethod
    async def capture_full_page(self) -> bytes:
        """Return a PNG of the full scrollable page."""

    @abstractmethod
    async def extract_anchors(self) -> List[Anchor]:
        """Return every link on the current page with an absolute href."""

    @abstractmethod
    async def force_eager_visibility(self) -> None:
        """Make lazy-visibility detection report every element as visible."""

    @abstractmethod
    async def wait(self, ms: int) -> None:
        """Sleep for a fixed delay inside the page's event loop."""


class PlaywrightPageDriver(PageDriver):
    """PageDriver backed by a Playwright async ``Page``."""

    def __init__(self, page):
        """
        Initialize the driver.

        Args:
            page: Playwright Page instance
        """
        self._page = page
        self._url_before_click: Optional[str] = None

    @property
    def page(self):
        return self._page

    @property
    def current_url(self) -> str:
        return self._page.url

    async def navigate(self, url: str, wait_until: str = "networkidle", timeout_ms: int = 60000) -> None:
        await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if arg is None:
            return await self._page.evaluate(script)
        return await self._page.evaluate(script, arg)

    async def wait_for_element(self, selector: str, visible: bool = True, timeout_ms: int = 10000) -> None:
        state = "visible" if visible else "attached"
        await self._page.wait_for_selector(selector, state=state, timeout=timeout_ms)

    async def type_into(self, selector: str, text: str) -> None:
        await self._page.type(selector, text)

    async def click(self, selector: str) -> None:
        self._url_before_click = self._page.url
        await self._page.click(selector)

    async def wait_for_navigation_settled(self, timeout_ms: int = 60000) -> None:
        """Wait until the URL differs from the pre-click URL and the network is idle."""
        before = self._url_before_click
        if before is None:
            await self._page.wait_for_load_state("networkidle", timeout=timeout_ms)
            return
        await self._page.wait_for_url(
            lambda url: url != before,
            wait_until="networkidle",
            timeout=timeout_ms,
        )

    async def capture_full_page(self) -> bytes:
        return await self._page.screenshot(full_page=True, type="png")

    async def extract_anchors(self) -> List[Anchor]:
        elements = await self._page.eval_on_selector_all("a[href]", ANCHOR_EXTRACTION_SCRIPT)
        return anchors_from_elements(elements)

    async def force_eager_visibility(self) -> None:
        patched = await self._page.evaluate(FORCE_VISIBILITY_SCRIPT)
        if not patched:
            logger.debug("IntersectionObserver not available; visibility shim skipped")

    async def wait(self, ms: int) -> None:
        if ms > 0:
            await self._page.wait_for_timeout(ms)


class BrowserSession:
    """
    Owns the Playwright browser, one context and one page.

    This class is designed to be used as an async context manager:

        async with BrowserSession(config) as session:
            await session.driver.navigate("https://example.com")
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        """
        Initialize the browser session.

        Args:
            config: BrowserConfig instance with browser settings
        """
        self._config = config or BrowserConfig()
        self._playwright = None
        self._browser = None
        self._context = None
        self._driver: Optional[PlaywrightPageDriver] = None

        logger.debug(f"BrowserSession initialized with config: {self._config}")

    @property
    def driver(self) -> PlaywrightPageDriver:
        if self._driver is None:
            raise BrowserNotStartedError(
                "Browser is not running. Use BrowserSession as an async context manager: "
                "async with BrowserSession(config) as session:"
            )
        return self._driver

    async def __aenter__(self) -> "BrowserSession":
        """Enter async context manager, launching browser."""
        from playwright.async_api import async_playwright

        logger.info(f"Launching {self._config.browser_type} browser (headless={self._config.headless})")

        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self._config.browser_type)

        launch_options = {"headless": self._config.headless}
        if self._config.launch_args:
            launch_options["args"] = self._config.launch_args

        try:
            self._browser = await browser_launcher.launch(**launch_options)

            context_options = {
                "viewport": self._config.viewport,
                "device_scale_factor": self._config.device_scale_factor,
            }
            if self._config.user_agent:
                context_options["user_agent"] = self._config.user_agent

            self._context = await self._browser.new_context(**context_options)
            self._context.set_default_timeout(self._config.timeout)
            page = await self._context.new_page()
        except Exception:
            await self._shutdown()
            raise

        self._driver = PlaywrightPageDriver(page)
        logger.info("Browser launched successfully")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager, closing browser."""
        await self._shutdown()
        logger.info("Browser closed successfully")

    async def _shutdown(self) -> None:
        self._driver = None
        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            logger.info("Closing browser")
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
