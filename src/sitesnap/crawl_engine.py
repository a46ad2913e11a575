"""Breadth-first crawl engine: one page at a time, every page captured."""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set

from sitesnap.browser import PageDriver
from sitesnap.browser_config import BrowserConfig
from sitesnap.capture import ScreenshotCapturer
from sitesnap.models import (
    Anchor,
    CaptureResult,
    CrawlTask,
    EngineState,
    LogRecord,
    PhaseResult,
    ROOT_REFERRER,
    ScopeConfig,
    SessionPhase,
)
from sitesnap.output_manager import PhaseOutputs
from sitesnap.run_log import RunLog
from sitesnap.stabilizer import PageStabilizer
from sitesnap.url_scope import (
    clean_link_text,
    is_discoverable,
    is_in_scope,
    is_related_domain,
    normalize_url,
)

logger = logging.getLogger(__name__)


def describe_error(error: Exception) -> str:
    """One-line description of an exception for the run log."""
    lines = str(error).strip().splitlines()
    if lines and lines[0].strip():
        return lines[0].strip()
    return type(error).__name__


@dataclass
class PhaseSession:
    """Mutable state of one crawl phase.

    Created fresh for every phase so nothing leaks from the public crawl into
    the authenticated one.
    """

    phase: SessionPhase
    scope: ScopeConfig
    outputs: PhaseOutputs
    run_log: RunLog
    queue: Deque[CrawlTask] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)
    visit_order: List[str] = field(default_factory=list)
    state: EngineState = EngineState.IDLE
    pages_captured: int = 0
    pages_failed: int = 0
    out_of_scope: Set[str] = field(default_factory=set)
    pages_discarded: int = 0

    @property
    def pages_processed(self) -> int:
        return len(self.visit_order)

    @property
    def pages_out_of_scope(self) -> int:
        """Distinct normalized URLs skipped for falling outside the root."""
        return len(self.out_of_scope)

    def mark_visited(self, normalized_url: str) -> None:
        self.visited.add(normalized_url)
        self.visit_order.append(normalized_url)

    def to_result(self) -> PhaseResult:
        return PhaseResult(
            phase=self.phase,
            log_path=self.outputs.log_path,
            screenshots_dir=self.outputs.screenshots_dir,
            pages_processed=self.pages_processed,
            pages_captured=self.pages_captured,
            pages_failed=self.pages_failed,
            pages_out_of_scope=self.pages_out_of_scope,
            pages_discarded=self.pages_discarded,
            visited=list(self.visit_order),
        )


class CrawlEngine:
    """Crawls a scope breadth-first, capturing each in-scope page.

    Every step (navigation, stabilization, capture) may fail. Failures are
    recorded as ``ERROR:`` rows in the run log and the crawl moves on to the
    next queued task; a single broken page never ends the phase.
    """

    def __init__(
        self,
        driver: PageDriver,
        stabilizer: Optional[PageStabilizer] = None,
        capturer: Optional[ScreenshotCapturer] = None,
        browser_config: Optional[BrowserConfig] = None,
        max_pages: Optional[int] = None,
    ):
        """
        Initialize the engine.

        Args:
            driver: PageDriver shared by every phase
            stabilizer: Page stabilizer (defaults to standard timings)
            capturer: Screenshot capturer (defaults to standard bounds)
            browser_config: Supplies navigation wait condition and timeout
            max_pages: Stop each phase after this many processed pages
        """
        self.driver = driver
        self.stabilizer = stabilizer or PageStabilizer()
        self.capturer = capturer or ScreenshotCapturer()
        self.browser_config = browser_config or BrowserConfig()
        self.max_pages = max_pages

    async def run(
        self,
        phase: SessionPhase,
        scope: ScopeConfig,
        outputs: PhaseOutputs,
        start_url: Optional[str] = None,
    ) -> PhaseResult:
        """
        Crawl one phase to completion.

        Args:
            phase: Which phase this is
            scope: Scope shared by both phases
            outputs: Screenshot directory and log path for this phase
            start_url: First page (defaults to the scope root)

        Returns:
            PhaseResult summary

        Raises:
            OutputSinkError: If the run log cannot be created
        """
        run_log = RunLog(outputs.log_path)
        run_log.start()

        session = PhaseSession(phase=phase, scope=scope, outputs=outputs, run_log=run_log)
        session.queue.append(CrawlTask.root(start_url or scope.crawl_root_url))
        session.state = EngineState.RUNNING

        logger.info(f"Starting {phase.value} crawl from {scope.crawl_root_url}")

        while session.queue:
            if self.max_pages is not None and session.pages_processed >= self.max_pages:
                logger.info(f"Page limit of {self.max_pages} reached")
                break
            await self.step(session)

        self._drain(session)

        logger.info(
            f"{phase.value.capitalize()} crawl finished: {session.pages_processed} pages, "
            f"{session.pages_captured} captured, {session.pages_failed} failed"
        )
        return session.to_result()

    async def step(self, session: PhaseSession) -> Optional[LogRecord]:
        """
        Process the next task in the frontier.

        Returns:
            The LogRecord written, or None if the task was skipped
        """
        task = session.queue.popleft()
        normalized = normalize_url(task.url)

        if normalized in session.visited:
            return None

        if not is_in_scope(normalized, session.scope):
            session.out_of_scope.add(normalized)
            if is_related_domain(normalized, session.scope):
                logger.info(
                    f"Skipping {normalized}: outside root scope "
                    f"'{session.scope.crawl_root_url}' but on a related domain"
                )
            else:
                logger.debug(f"Skipping external link: {normalized}")
            return None

        # Marked before any awaits so rediscovery of this page can't requeue it
        session.mark_visited(normalized)

        result = await self._visit(normalized, session)

        record = LogRecord(
            from_url=task.referrer_url or ROOT_REFERRER,
            link_text=task.link_text,
            to_url=normalized,
            outcome=result.outcome,
        )
        session.run_log.append(record)

        if result.ok:
            session.pages_captured += 1
            anchors = await self._discover_links(normalized)
            queued = self._enqueue_links(session, normalized, anchors)
            logger.debug(f"Queued {queued} new links from {normalized}")
        else:
            session.pages_failed += 1

        return record

    async def _visit(self, url: str, session: PhaseSession) -> CaptureResult:
        """Navigate, stabilize and capture one page."""
        try:
            logger.info(f"Navigating to {url}...")
            await self.driver.navigate(
                url,
                wait_until=self.browser_config.wait_until,
                timeout_ms=self.browser_config.timeout,
            )

            is_root = url == session.scope.crawl_root_url
            await self.stabilizer.stabilize(self.driver, is_root=is_root)

            path = await self.capturer.capture(self.driver, url, session.outputs.screenshots_dir)
            logger.info(f"Screenshot saved for {url} to {path}")
            return CaptureResult(path=path)

        except Exception as e:
            message = describe_error(e)
            logger.error(f"Failed to capture or process {url}: {message}")
            return CaptureResult(error=message)

    async def _discover_links(self, url: str) -> List[Anchor]:
        try:
            return await self.driver.extract_anchors()
        except Exception as e:
            logger.warning(f"Link extraction failed for {url}: {describe_error(e)}")
            return []

    def _enqueue_links(self, session: PhaseSession, from_url: str, anchors: List[Anchor]) -> int:
        """Add discoverable, in-root, unvisited links to the frontier."""
        queued = 0
        for anchor in anchors:
            if not is_discoverable(anchor.href, session.scope):
                continue
            normalized = normalize_url(anchor.href)
            if normalized in session.visited:
                continue
            if not is_in_scope(normalized, session.scope):
                if normalized in session.out_of_scope:
                    continue
                session.out_of_scope.add(normalized)
                logger.debug(
                    f"Not queueing {normalized}: outside root scope "
                    f"'{session.scope.crawl_root_url}' but on a related domain"
                )
                continue
            session.queue.append(CrawlTask(
                url=anchor.href,
                referrer_url=from_url,
                link_text=clean_link_text(anchor.text),
            ))
            queued += 1
        return queued

    def _drain(self, session: PhaseSession) -> None:
        """Discard whatever is left in the frontier and finish the phase."""
        session.state = EngineState.DRAINING
        if session.queue:
            session.pages_discarded = len(session.queue)
            logger.info(f"Discarding {session.pages_discarded} queued links")
            session.queue.clear()
        session.state = EngineState.DONE
