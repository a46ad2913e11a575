"""Shared fixtures: a scripted in-memory PageDriver and image helpers."""

from io import BytesIO
from typing import Dict, List, Optional

import pytest
from PIL import Image

from sitesnap.browser import PageDriver
from sitesnap.config import CrawlerConfig, StabilizerTimings
from sitesnap.models import Anchor
from sitesnap.stabilizer import (
    NEUTRALIZE_SCRIPT,
    SCROLL_BY_SCRIPT,
    SCROLL_METRICS_SCRIPT,
    SCROLL_TO_BOTTOM_SCRIPT,
    SCROLL_TO_TOP_SCRIPT,
)


def make_png(width: int = 40, height: int = 30, color=(200, 30, 30)) -> bytes:
    """Encode a solid-color PNG."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeTimeoutError(Exception):
    """Stands in for playwright's TimeoutError."""


class FakePageDriver(PageDriver):
    """
    In-memory PageDriver.

    ``site`` maps normalized page URLs to the anchors on that page. Pages not
    in the map load fine and have no links. ``auth_site`` replaces ``site``
    once a login has gone through.
    """

    def __init__(
        self,
        site: Optional[Dict[str, List[Anchor]]] = None,
        auth_site: Optional[Dict[str, List[Anchor]]] = None,
        nav_failures: Optional[Dict[str, Exception]] = None,
        capture_failures: Optional[Dict[str, Exception]] = None,
        present_selectors: Optional[List[str]] = None,
        navigates_on_submit: bool = True,
        page_height: int = 1000,
        viewport_height: int = 500,
        stuck_scroll: bool = False,
        growing_page: bool = False,
        offset_script: Optional[List[int]] = None,
        submit_selector: str = 'button[type="submit"]',
        png: Optional[bytes] = None,
    ):
        self.site = site or {}
        self.auth_site = auth_site
        self.nav_failures = nav_failures or {}
        self.capture_failures = capture_failures or {}
        self.present_selectors = set(present_selectors or [])
        self.navigates_on_submit = navigates_on_submit
        self.page_height = page_height
        self.viewport_height = viewport_height
        self.stuck_scroll = stuck_scroll
        self.growing_page = growing_page
        self.offset_script = list(offset_script) if offset_script is not None else None
        self.submit_selector = submit_selector
        self.png = png or make_png()

        self.logged_in = False
        self.offset = 0
        self._url = "about:blank"
        self._clicked = False

        self.navigations: List[str] = []
        self.scripts: List[str] = []
        self.waits: List[int] = []
        self.typed: List[tuple] = []
        self.clicks: List[str] = []
        self.eager_forced = 0
        self.captures = 0

    @property
    def current_url(self) -> str:
        return self._url

    async def navigate(self, url, wait_until="networkidle", timeout_ms=60000):
        self.navigations.append(url)
        if url in self.nav_failures:
            raise self.nav_failures[url]
        self._url = url
        self.offset = 0
        self._clicked = False

    async def evaluate(self, script, arg=None):
        self.scripts.append(script)
        max_offset = max(0, self.page_height - self.viewport_height)

        if script == SCROLL_TO_TOP_SCRIPT:
            self.offset = 0
        elif script == SCROLL_BY_SCRIPT:
            if self.offset_script is not None:
                self.offset = self.offset_script.pop(0) if self.offset_script else self.offset
            elif self.growing_page:
                self.page_height += arg
                self.offset += arg
            elif not self.stuck_scroll:
                self.offset = min(self.offset + arg, max_offset)
        elif script == SCROLL_METRICS_SCRIPT:
            return {
                "offset": self.offset,
                "bottom": self.offset + self.viewport_height,
                "height": self.page_height,
            }
        elif script == SCROLL_TO_BOTTOM_SCRIPT:
            if not self.stuck_scroll:
                self.offset = max_offset
        elif script == NEUTRALIZE_SCRIPT:
            return None
        return None

    async def wait_for_element(self, selector, visible=True, timeout_ms=10000):
        if selector not in self.present_selectors:
            raise FakeTimeoutError(f"Timeout {timeout_ms}ms exceeded waiting for {selector}")

    async def type_into(self, selector, text):
        self.typed.append((selector, text))

    async def click(self, selector):
        self.clicks.append(selector)
        self._clicked = True
        if selector == self.submit_selector and self.navigates_on_submit:
            self.logged_in = True

    async def wait_for_navigation_settled(self, timeout_ms=60000):
        if not (self._clicked and self.navigates_on_submit):
            raise FakeTimeoutError(f"Timeout {timeout_ms}ms exceeded waiting for navigation")
        self._url = self._url.rsplit("/", 1)[0] + "/dashboard"

    async def capture_full_page(self):
        self.captures += 1
        if self._url in self.capture_failures:
            raise self.capture_failures[self._url]
        return self.png

    async def extract_anchors(self):
        pages = self.auth_site if (self.logged_in and self.auth_site is not None) else self.site
        return list(pages.get(self._url, []))

    async def force_eager_visibility(self):
        self.eager_forced += 1

    async def wait(self, ms):
        self.waits.append(ms)


@pytest.fixture
def instant_timings():
    """Stabilizer timings with no delays."""
    return StabilizerTimings.instant()


@pytest.fixture
def crawler_config(tmp_path, instant_timings):
    """Config for https://site.test writing into a temp directory."""
    config = CrawlerConfig(site_url="https://site.test/", output_dir=tmp_path / "out")
    config.timings = instant_timings
    return config


@pytest.fixture
def make_driver():
    """Factory for FakePageDriver instances."""
    return FakePageDriver


@pytest.fixture
def png_factory():
    """Factory for encoded PNG buffers."""
    return make_png
