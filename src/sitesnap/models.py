"""Data models for the crawl-and-capture pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

ROOT_LINK_TEXT = "ROOT"
ROOT_REFERRER = "ROOT"
ERROR_PREFIX = "ERROR: "


class SessionPhase(Enum):
    """Crawl passes run against the same scope."""
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"


class EngineState(Enum):
    """Lifecycle of one crawl engine run."""
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


@dataclass(frozen=True)
class ScopeConfig:
    """Boundaries for a crawl phase.

    crawl_root_url is the prefix every captured page must start with;
    crawl_domain gates freshly discovered links (exact host or subdomain).
    """

    crawl_root_url: str
    crawl_domain: str


@dataclass
class CrawlTask:
    """A unit of work in the frontier."""

    url: str
    referrer_url: Optional[str] = None
    link_text: str = ROOT_LINK_TEXT

    @classmethod
    def root(cls, url: str) -> "CrawlTask":
        """Synthetic task that starts a phase."""
        return cls(url=url, referrer_url=None, link_text=ROOT_LINK_TEXT)


@dataclass(frozen=True)
class Anchor:
    """An <a href> found on a rendered page."""

    href: str
    text: str = ""


@dataclass
class CaptureResult:
    """Outcome of capturing a single page."""

    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.path is not None and self.error is None

    @property
    def outcome(self) -> str:
        """Value stored in the run log's last column."""
        if self.ok:
            return str(self.path)
        return f"{ERROR_PREFIX}{self.error}"


@dataclass
class LogRecord:
    """One row of the run log."""

    from_url: str
    link_text: str
    to_url: str
    outcome: str

    @property
    def is_error(self) -> bool:
        return self.outcome.startswith(ERROR_PREFIX)

    def as_row(self) -> list[str]:
        return [self.from_url, self.link_text, self.to_url, self.outcome]


@dataclass
class PhaseResult:
    """Summary of a finished crawl phase."""

    phase: SessionPhase
    log_path: Path
    screenshots_dir: Path
    pages_processed: int = 0
    pages_captured: int = 0
    pages_failed: int = 0
    pages_out_of_scope: int = 0
    pages_discarded: int = 0
    visited: list[str] = field(default_factory=list)


@dataclass
class RunResult:
    """Summary of a full public + authenticated run."""

    public: PhaseResult
    authenticated: Optional[PhaseResult] = None
    login_attempted: bool = False
    login_succeeded: bool = False
