"""
Browser configuration for Playwright-based capture.

This module provides a validated Pydantic configuration model for all
browser-related settings and pre-configured instances for common use cases.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from sitesnap.constants import (
    DEFAULT_NAVIGATION_TIMEOUT_MS,
    DEFAULT_USER_AGENT,
    DESKTOP_VIEWPORT_HEIGHT,
    DESKTOP_VIEWPORT_WIDTH,
)


class BrowserConfig(BaseModel):
    """
    Configuration for the browser session shared by both crawl phases.

    All fields are validated by Pydantic to ensure type safety and valid values.
    """

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode (no visible UI)"
    )

    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to use for crawling"
    )

    timeout: int = Field(
        default=DEFAULT_NAVIGATION_TIMEOUT_MS,
        description="Page navigation timeout in milliseconds",
        ge=1000,
        le=300000
    )

    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="networkidle",
        description="When to consider navigation complete"
    )

    viewport_width: int = Field(
        default=DESKTOP_VIEWPORT_WIDTH,
        description="Viewport width in CSS pixels",
        ge=320,
    )

    viewport_height: int = Field(
        default=DESKTOP_VIEWPORT_HEIGHT,
        description="Viewport height in CSS pixels",
        ge=240,
    )

    device_scale_factor: float = Field(
        default=1,
        description="Device pixel ratio used for screenshots",
        gt=0,
        le=4,
    )

    user_agent: Optional[str] = Field(
        default=DEFAULT_USER_AGENT,
        description="User agent for the browser context. None keeps the engine default."
    )

    launch_args: List[str] = Field(
        default_factory=list,
        description="Additional browser launch arguments (e.g., '--disable-http2')"
    )

    class Config:
        """Pydantic model configuration."""
        frozen = False
        validate_assignment = True

    @property
    def viewport(self) -> dict:
        return {"width": self.viewport_width, "height": self.viewport_height}


# --- Pre-configured Instances for Common Use Cases ---

DEFAULT_CONFIG = BrowserConfig()
"""
Headless Chromium at 1920x1080, waiting for network idle on every page.
"""

DEBUG_CONFIG = BrowserConfig(
    headless=False,
    timeout=120000,
)
"""
Visible browser with a generous navigation timeout.

Best for watching the stabilizer work on a problematic page.
"""

RETINA_CONFIG = BrowserConfig(
    device_scale_factor=2,
)
"""
High-density captures. Expect images to hit the output bounds more often.
"""
