"""Two-phase run: public crawl, login, authenticated crawl."""

import logging
from typing import Optional

from sitesnap.auth import Authenticator, CredentialProvider
from sitesnap.browser import PageDriver
from sitesnap.capture import ScreenshotCapturer
from sitesnap.config import CrawlerConfig
from sitesnap.crawl_engine import CrawlEngine
from sitesnap.models import RunResult, SessionPhase
from sitesnap.output_manager import OutputManager
from sitesnap.stabilizer import PageStabilizer
from sitesnap.url_scope import build_scope

logger = logging.getLogger(__name__)


class SessionPhaseController:
    """Runs the public phase, authenticates, then runs the authenticated phase.

    Both phases share the scope and the browser page; each gets a fresh
    queue, visited set, screenshot directory and run log. If login fails the
    authenticated phase is skipped and none of its outputs are created.
    """

    def __init__(
        self,
        driver: PageDriver,
        config: CrawlerConfig,
        credentials: Optional[CredentialProvider] = None,
        engine: Optional[CrawlEngine] = None,
        authenticator: Optional[Authenticator] = None,
        output_manager: Optional[OutputManager] = None,
    ):
        """
        Initialize the controller.

        Args:
            driver: PageDriver shared by both phases
            config: Crawler configuration (site URL required)
            credentials: Credential source for the login step
            engine: Crawl engine (built from config if omitted)
            authenticator: Authenticator (built from config if omitted)
            output_manager: Output layout (built from config if omitted)
        """
        if not config.site_url:
            raise ValueError("A site URL is required")

        self.driver = driver
        self.config = config
        self.credentials = credentials
        self.scope = build_scope(config.site_url)
        self.output_manager = output_manager or OutputManager(config.output_dir, config.layout)
        self.engine = engine or CrawlEngine(
            driver,
            stabilizer=PageStabilizer(config.timings),
            capturer=ScreenshotCapturer(config.capture),
            browser_config=config.browser,
            max_pages=config.max_pages,
        )
        self.authenticator = authenticator or Authenticator(
            config.login,
            debug_dir=self.output_manager.debug_dir(),
            wait_until=config.browser.wait_until,
            navigation_timeout_ms=config.browser.timeout,
        )

    async def run(self, skip_auth: bool = False) -> RunResult:
        """
        Run both phases.

        Args:
            skip_auth: Stop after the public phase

        Returns:
            RunResult with a PhaseResult per phase that ran

        Raises:
            OutputSinkError: If a phase's output directory or log can't be created
        """
        logger.info("--- Starting Public Crawl ---")
        public = await self._run_phase(SessionPhase.PUBLIC)
        logger.info("--- Public Crawl Finished ---")

        result = RunResult(public=public)

        if skip_auth:
            logger.info("Authenticated crawl disabled")
            return result
        if not self.config.login.enabled:
            logger.info("No login URL configured; skipping authenticated crawl")
            return result

        logger.info("--- Attempting Login ---")
        result.login_attempted = True
        credentials = self.credentials.get_credentials() if self.credentials else None
        result.login_succeeded = await self.authenticator.authenticate(self.driver, credentials)

        if not result.login_succeeded:
            logger.info("Skipping authenticated crawl due to login failure.")
            return result

        logger.info(f"--- Starting Authenticated Crawl from {self.scope.crawl_root_url} ---")
        result.authenticated = await self._run_phase(SessionPhase.AUTHENTICATED)
        logger.info("--- Authenticated Crawl Finished ---")

        return result

    async def _run_phase(self, phase: SessionPhase):
        outputs = self.output_manager.prepare_phase(phase)
        return await self.engine.run(phase, self.scope, outputs)
