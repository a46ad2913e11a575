"""Breadth-first site crawler that screenshots every page, public and logged in."""

__version__ = "0.1.0"

from sitesnap.auth import (
    Authenticator,
    CredentialProvider,
    Credentials,
    EnvCredentialProvider,
    PromptCredentialProvider,
    StaticCredentialProvider,
)
from sitesnap.browser import BrowserSession, PageDriver, PlaywrightPageDriver
from sitesnap.browser_config import BrowserConfig
from sitesnap.capture import ImageCodec, ScreenshotCapturer, fit_within
from sitesnap.config import (
    CaptureSettings,
    CrawlerConfig,
    LoginConfig,
    OutputLayout,
    StabilizerTimings,
    settings,
)
from sitesnap.crawl_engine import CrawlEngine, PhaseSession
from sitesnap.models import (
    Anchor,
    CaptureResult,
    CrawlTask,
    EngineState,
    LogRecord,
    PhaseResult,
    RunResult,
    ScopeConfig,
    SessionPhase,
)
from sitesnap.output_manager import OutputManager, OutputSinkError, PhaseOutputs
from sitesnap.run_log import RunLog, read_records
from sitesnap.session_controller import SessionPhaseController
from sitesnap.stabilizer import PageStabilizer, ScrollReport
from sitesnap.url_scope import (
    build_scope,
    clean_link_text,
    is_discoverable,
    is_in_scope,
    normalize_url,
    sanitize_filename,
)

__all__ = [
    # Core
    "CrawlEngine",
    "PhaseSession",
    "SessionPhaseController",
    "PageStabilizer",
    "ScrollReport",
    "ScreenshotCapturer",
    "ImageCodec",
    "fit_within",
    "RunLog",
    "read_records",
    "OutputManager",
    "OutputSinkError",
    "PhaseOutputs",
    # Browser
    "BrowserSession",
    "PageDriver",
    "PlaywrightPageDriver",
    "BrowserConfig",
    # Auth
    "Authenticator",
    "CredentialProvider",
    "Credentials",
    "EnvCredentialProvider",
    "PromptCredentialProvider",
    "StaticCredentialProvider",
    # Config
    "CaptureSettings",
    "CrawlerConfig",
    "LoginConfig",
    "OutputLayout",
    "StabilizerTimings",
    "settings",
    # Models
    "Anchor",
    "CaptureResult",
    "CrawlTask",
    "EngineState",
    "LogRecord",
    "PhaseResult",
    "RunResult",
    "ScopeConfig",
    "SessionPhase",
    # URL scope
    "build_scope",
    "clean_link_text",
    "is_discoverable",
    "is_in_scope",
    "normalize_url",
    "sanitize_filename",
]
