from dotenv import load_dotenv
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional
from pathlib import Path
import os

import yaml

from sitesnap.browser_config import BrowserConfig
from sitesnap.constants import (
    AUTHENTICATED_LOG_FILE,
    AUTHENTICATED_SCREENSHOTS_DIR,
    DEBUG_SCREENSHOTS_DIR,
    DEFAULT_BOTTOM_SETTLE_MS,
    DEFAULT_INITIAL_SETTLE_MS,
    DEFAULT_LOGIN_NAVIGATION_TIMEOUT_MS,
    DEFAULT_LOGIN_SUCCESS_TIMEOUT_MS,
    DEFAULT_MAX_IMAGE_HEIGHT,
    DEFAULT_MAX_IMAGE_WIDTH,
    DEFAULT_MAX_SCROLL_STEPS,
    DEFAULT_MAX_STALLED_STEPS,
    DEFAULT_PASSWORD_SELECTOR,
    DEFAULT_PASSWORD_TIMEOUT_MS,
    DEFAULT_POST_SCROLL_SETTLE_MS,
    DEFAULT_RESTYLE_SETTLE_MS,
    DEFAULT_ROOT_STEP_DELAY_MS,
    DEFAULT_SCROLL_STEP_PX,
    DEFAULT_STEP_DELAY_MS,
    DEFAULT_SUBMIT_SELECTOR,
    DEFAULT_USERNAME_SELECTOR,
    DEFAULT_USERNAME_TIMEOUT_MS,
    PUBLIC_LOG_FILE,
    PUBLIC_SCREENSHOTS_DIR,
)
from sitesnap.models import SessionPhase

load_dotenv()  # Loads variables from .env file


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    SITE_URL = os.getenv("SITESNAP_SITE_URL")
    LOGIN_URL = os.getenv("SITESNAP_LOGIN_URL")
    USERNAME = os.getenv("SITESNAP_USERNAME")
    PASSWORD = os.getenv("SITESNAP_PASSWORD")
    OUTPUT_DIR = os.getenv("SITESNAP_OUTPUT_DIR", ".")
    LOG_LEVEL = os.getenv("SITESNAP_LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("SITESNAP_LOG_FILE")
    USER_AGENT = os.getenv("SITESNAP_USER_AGENT")


settings = Settings()


def _coerce(value: str, field_type: Any) -> Any:
    """Convert an environment string to a dataclass field's type."""
    if field_type == bool:
        return value.strip().lower() in ("1", "true", "yes", "on")
    if field_type == int:
        return int(value)
    if field_type == float:
        return float(value)
    return value


def _apply_env(instance: Any, prefix: str) -> Any:
    """Override dataclass fields from ``<prefix><FIELD_NAME>`` variables."""
    for f in fields(instance):
        env_value = os.getenv(f"{prefix}{f.name.upper()}")
        if env_value is None:
            continue
        try:
            setattr(instance, f.name, _coerce(env_value, f.type))
        except ValueError:
            pass  # Keep default if conversion fails
    return instance


def _apply_dict(instance: Any, values: Optional[Dict[str, Any]]) -> Any:
    """Override dataclass fields from a mapping, ignoring unknown keys."""
    if not values:
        return instance
    for f in fields(instance):
        if f.name in values:
            setattr(instance, f.name, values[f.name])
    return instance


@dataclass
class StabilizerTimings:
    """Tunable scroll and settle timings for the page stabilizer.

    The defaults were picked empirically; none of them is derived from a
    measured page-load signal.
    """

    scroll_step_px: int = DEFAULT_SCROLL_STEP_PX
    step_delay_ms: int = DEFAULT_STEP_DELAY_MS
    root_step_delay_ms: int = DEFAULT_ROOT_STEP_DELAY_MS
    initial_settle_ms: int = DEFAULT_INITIAL_SETTLE_MS
    max_stalled_steps: int = DEFAULT_MAX_STALLED_STEPS
    max_scroll_steps: int = DEFAULT_MAX_SCROLL_STEPS
    bottom_settle_ms: int = DEFAULT_BOTTOM_SETTLE_MS
    post_scroll_settle_ms: int = DEFAULT_POST_SCROLL_SETTLE_MS
    restyle_settle_ms: int = DEFAULT_RESTYLE_SETTLE_MS

    @classmethod
    def from_env(cls) -> "StabilizerTimings":
        """Load timings from environment variables.

        Environment variables are prefixed with SITESNAP_TIMING_
        e.g., SITESNAP_TIMING_STEP_DELAY_MS=150

        Returns:
            StabilizerTimings with values from environment
        """
        return _apply_env(cls(), "SITESNAP_TIMING_")

    @classmethod
    def instant(cls) -> "StabilizerTimings":
        """Timings with every delay set to zero."""
        return cls(
            step_delay_ms=0,
            root_step_delay_ms=0,
            initial_settle_ms=0,
            bottom_settle_ms=0,
            post_scroll_settle_ms=0,
            restyle_settle_ms=0,
        )


@dataclass
class CaptureSettings:
    """Output bounds for normalized screenshots."""

    max_width: int = DEFAULT_MAX_IMAGE_WIDTH
    max_height: int = DEFAULT_MAX_IMAGE_HEIGHT

    @classmethod
    def from_env(cls) -> "CaptureSettings":
        return _apply_env(cls(), "SITESNAP_CAPTURE_")


@dataclass
class LoginConfig:
    """Where and how to log in before the authenticated phase."""

    login_url: Optional[str] = None
    username_selector: str = DEFAULT_USERNAME_SELECTOR
    password_selector: str = DEFAULT_PASSWORD_SELECTOR
    submit_selector: str = DEFAULT_SUBMIT_SELECTOR
    success_selector: Optional[str] = None
    username_timeout_ms: int = DEFAULT_USERNAME_TIMEOUT_MS
    password_timeout_ms: int = DEFAULT_PASSWORD_TIMEOUT_MS
    navigation_timeout_ms: int = DEFAULT_LOGIN_NAVIGATION_TIMEOUT_MS
    success_timeout_ms: int = DEFAULT_LOGIN_SUCCESS_TIMEOUT_MS

    @property
    def enabled(self) -> bool:
        return bool(self.login_url)

    @classmethod
    def from_env(cls) -> "LoginConfig":
        """Load login settings from SITESNAP_LOGIN_* variables."""
        config = _apply_env(cls(), "SITESNAP_LOGIN_")
        if not config.login_url:
            config.login_url = os.getenv("SITESNAP_LOGIN_URL")
        return config


@dataclass
class OutputLayout:
    """File and directory names for each phase, relative to the output dir."""

    public_screenshots_dir: str = PUBLIC_SCREENSHOTS_DIR
    public_log_file: str = PUBLIC_LOG_FILE
    authenticated_screenshots_dir: str = AUTHENTICATED_SCREENSHOTS_DIR
    authenticated_log_file: str = AUTHENTICATED_LOG_FILE
    debug_dir: str = DEBUG_SCREENSHOTS_DIR

    def screenshots_dir_for(self, phase: SessionPhase) -> str:
        if phase is SessionPhase.PUBLIC:
            return self.public_screenshots_dir
        return self.authenticated_screenshots_dir

    def log_file_for(self, phase: SessionPhase) -> str:
        if phase is SessionPhase.PUBLIC:
            return self.public_log_file
        return self.authenticated_log_file


@dataclass
class CrawlerConfig:
    """Everything a two-phase run needs."""

    site_url: Optional[str] = None
    output_dir: Path = Path(".")
    max_pages: Optional[int] = None
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    timings: StabilizerTimings = field(default_factory=StabilizerTimings)
    capture: CaptureSettings = field(default_factory=CaptureSettings)
    login: LoginConfig = field(default_factory=LoginConfig)
    layout: OutputLayout = field(default_factory=OutputLayout)

    @classmethod
    def from_env(cls) -> "CrawlerConfig":
        """Load configuration from environment variables.

        Returns:
            CrawlerConfig: Configuration instance with values from environment
        """
        browser = BrowserConfig()
        user_agent = os.getenv("SITESNAP_USER_AGENT")
        if user_agent:
            browser.user_agent = user_agent

        max_pages = os.getenv("SITESNAP_MAX_PAGES")
        return cls(
            site_url=os.getenv("SITESNAP_SITE_URL"),
            output_dir=Path(os.getenv("SITESNAP_OUTPUT_DIR", ".")),
            max_pages=int(max_pages) if max_pages and max_pages.isdigit() else None,
            browser=browser,
            timings=StabilizerTimings.from_env(),
            capture=CaptureSettings.from_env(),
            login=LoginConfig.from_env(),
        )

    @classmethod
    def from_file(cls, path: str) -> "CrawlerConfig":
        """Load configuration from a YAML file layered over the environment.

        Expected layout::

            site_url: https://example.com
            output_dir: ./captures
            max_pages: 200
            browser: {headless: true, timeout: 60000}
            timings: {step_delay_ms: 200}
            capture: {max_width: 4096}
            login: {login_url: https://example.com/login, success_selector: "#avatar"}
            layout: {debug_dir: debug}

        Args:
            path: Path to YAML configuration file

        Returns:
            CrawlerConfig with values from file over environment defaults
        """
        config = cls.from_env()
        file_path = Path(path)

        if not file_path.exists():
            return config

        with open(file_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if "site_url" in data:
            config.site_url = data["site_url"]
        if "output_dir" in data:
            config.output_dir = Path(data["output_dir"])
        if "max_pages" in data:
            config.max_pages = data["max_pages"]
        if data.get("browser"):
            config.browser = BrowserConfig.model_validate(
                {**config.browser.model_dump(), **data["browser"]}
            )

        _apply_dict(config.timings, data.get("timings"))
        _apply_dict(config.capture, data.get("capture"))
        _apply_dict(config.login, data.get("login"))
        _apply_dict(config.layout, data.get("layout"))

        return config
