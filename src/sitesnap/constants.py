# src/sitesnap/constants.py
"""Centralized constants for the crawl-and-capture pipeline.

This module contains fixed values shared across modules. For tunable
timings and limits, see config.py.
"""

# =============================================================================
# URL & Link Constants
# =============================================================================

# Anchor text is bounded before it goes into the run log
MAX_LINK_TEXT_LENGTH = 100

# Placeholder used when an anchor has no visible text
NO_LINK_TEXT_PLACEHOLDER = "(no text)"

# Screenshot file stems derived from URLs are truncated to this length
MAX_FILENAME_LENGTH = 100

SCREENSHOT_EXTENSION = ".png"


# =============================================================================
# Run Log Constants
# =============================================================================

RUN_LOG_HEADER = ["FROM", "LINK TEXT", "TO", "SCREENSHOT FILE"]

RUN_LOG_ENCODING = "utf-8"


# =============================================================================
# Page Stabilization Defaults
# =============================================================================

DEFAULT_SCROLL_STEP_PX = 100
DEFAULT_STEP_DELAY_MS = 300

# The scope root usually carries the heaviest above-the-fold content
DEFAULT_ROOT_STEP_DELAY_MS = 500

DEFAULT_INITIAL_SETTLE_MS = 500

# Consecutive non-advancing scroll steps tolerated before giving up
DEFAULT_MAX_STALLED_STEPS = 3

# Hard cap on scroll steps for pages that keep growing
DEFAULT_MAX_SCROLL_STEPS = 2000

DEFAULT_BOTTOM_SETTLE_MS = 2000
DEFAULT_POST_SCROLL_SETTLE_MS = 2500
DEFAULT_RESTYLE_SETTLE_MS = 500


# =============================================================================
# Capture Defaults
# =============================================================================

DEFAULT_MAX_IMAGE_WIDTH = 8192
DEFAULT_MAX_IMAGE_HEIGHT = 4096

# Decode limit for raw screenshots. Pillow refuses images over twice this
# many pixels, which turns a runaway page into an ERROR row.
MAX_DECODE_PIXELS = 500_000_000


# =============================================================================
# Browser Defaults
# =============================================================================

DESKTOP_VIEWPORT_WIDTH = 1920
DESKTOP_VIEWPORT_HEIGHT = 1080

DEFAULT_NAVIGATION_TIMEOUT_MS = 60000

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 SiteSnapBot/1.0"
)


# =============================================================================
# Login Defaults
# =============================================================================

DEFAULT_USERNAME_SELECTOR = "input#email"
DEFAULT_PASSWORD_SELECTOR = "input#password"
DEFAULT_SUBMIT_SELECTOR = 'button[type="submit"]'

DEFAULT_USERNAME_TIMEOUT_MS = 10000
DEFAULT_PASSWORD_TIMEOUT_MS = 5000
DEFAULT_LOGIN_NAVIGATION_TIMEOUT_MS = 60000
DEFAULT_LOGIN_SUCCESS_TIMEOUT_MS = 15000

LOGIN_FAILURE_SCREENSHOT = "login_failure.png"


# =============================================================================
# Output Layout Defaults
# =============================================================================

PUBLIC_SCREENSHOTS_DIR = "screenshots_public"
PUBLIC_LOG_FILE = "screenshot_log_public.csv"
AUTHENTICATED_SCREENSHOTS_DIR = "screenshots_authenticated"
AUTHENTICATED_LOG_FILE = "screenshot_log_authenticated.csv"
DEBUG_SCREENSHOTS_DIR = "debug_screenshots"
