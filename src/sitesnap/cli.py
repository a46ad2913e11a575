"""Command-line interface for sitesnap."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sitesnap.auth import CredentialProvider, EnvCredentialProvider, PromptCredentialProvider
from sitesnap.browser import BrowserSession
from sitesnap.config import CrawlerConfig, settings
from sitesnap.logging_config import setup_logging
from sitesnap.models import RunResult
from sitesnap.output_manager import OutputSinkError
from sitesnap.session_controller import SessionPhaseController

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitesnap",
        description="Crawl a site breadth-first and screenshot every page, "
                    "anonymously and then logged in.",
    )
    parser.add_argument('url', nargs='?', help='Site root URL (or SITESNAP_SITE_URL)')
    parser.add_argument('--config', type=str, metavar='PATH',
                        help='YAML configuration file')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Directory for screenshots and run logs (default: .)')
    parser.add_argument('--max-pages', type=int, default=None,
                        help='Stop each phase after this many pages (default: unlimited)')
    parser.add_argument('--max-width', type=int, default=None,
                        help='Maximum screenshot width in pixels (default: 8192)')
    parser.add_argument('--max-height', type=int, default=None,
                        help='Maximum screenshot height in pixels (default: 4096)')

    # Login options
    parser.add_argument('--login-url', type=str, default=None,
                        help='Login page URL; without one the authenticated crawl is skipped')
    parser.add_argument('--username-selector', type=str, default=None,
                        help='CSS selector of the username field (default: input#email)')
    parser.add_argument('--password-selector', type=str, default=None,
                        help='CSS selector of the password field (default: input#password)')
    parser.add_argument('--submit-selector', type=str, default=None,
                        help='CSS selector of the submit button (default: button[type="submit"])')
    parser.add_argument('--success-selector', type=str, default=None,
                        help='CSS selector that only appears once logged in')
    parser.add_argument('--skip-auth', action='store_true',
                        help='Only run the public crawl')
    parser.add_argument('--no-prompt', action='store_true',
                        help='Never prompt for credentials; read SITESNAP_USERNAME/SITESNAP_PASSWORD only')

    # Browser options
    parser.add_argument('--headed', action='store_true',
                        help='Show the browser window')
    parser.add_argument('--browser-type', choices=['chromium', 'firefox', 'webkit'], default=None,
                        help='Browser engine (default: chromium)')
    parser.add_argument('--timeout', type=int, default=None,
                        help='Navigation timeout in milliseconds (default: 60000)')

    # Logging options
    parser.add_argument('--log-level', type=str, default=settings.LOG_LEVEL,
                        help='Log level (default: INFO)')
    parser.add_argument('--log-file', type=str, default=settings.LOG_FILE,
                        help='Also write logs to this file')
    return parser


def build_config(args: argparse.Namespace) -> CrawlerConfig:
    """Layer CLI flags over the YAML file and environment."""
    config = CrawlerConfig.from_file(args.config) if args.config else CrawlerConfig.from_env()

    if args.url:
        config.site_url = args.url
    if args.output_dir:
        config.output_dir = Path(args.output_dir)
    if args.max_pages is not None:
        config.max_pages = args.max_pages
    if args.max_width is not None:
        config.capture.max_width = args.max_width
    if args.max_height is not None:
        config.capture.max_height = args.max_height

    if args.login_url:
        config.login.login_url = args.login_url
    if args.username_selector:
        config.login.username_selector = args.username_selector
    if args.password_selector:
        config.login.password_selector = args.password_selector
    if args.submit_selector:
        config.login.submit_selector = args.submit_selector
    if args.success_selector:
        config.login.success_selector = args.success_selector

    if args.headed:
        config.browser.headless = False
    if args.browser_type:
        config.browser.browser_type = args.browser_type
    if args.timeout is not None:
        config.browser.timeout = args.timeout

    return config


def build_credential_provider(no_prompt: bool) -> CredentialProvider:
    env_provider = EnvCredentialProvider()
    if no_prompt:
        return env_provider
    return PromptCredentialProvider(fallback=env_provider)


async def run(config: CrawlerConfig, credentials: CredentialProvider, skip_auth: bool = False) -> RunResult:
    """Launch the browser and run both phases."""
    async with BrowserSession(config.browser) as session:
        controller = SessionPhaseController(session.driver, config, credentials=credentials)
        return await controller.run(skip_auth=skip_auth)


def print_summary(result: RunResult) -> None:
    phases = [result.public]
    if result.authenticated:
        phases.append(result.authenticated)

    print(f"\n{'=' * 60}")
    for phase in phases:
        print(f"{phase.phase.value.capitalize()} crawl:")
        print(f"  • Pages processed: {phase.pages_processed}")
        print(f"  • Captured: {phase.pages_captured}")
        print(f"  • Failed: {phase.pages_failed}")
        if phase.pages_discarded:
            print(f"  • Left in queue (page limit): {phase.pages_discarded}")
        print(f"  • Log: {phase.log_path}")
        print(f"  • Screenshots: {phase.screenshots_dir}")
    if result.login_attempted and not result.login_succeeded:
        print("Login failed; authenticated crawl skipped.")
    print(f"{'=' * 60}\n")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)

    config = build_config(args)
    if not config.site_url:
        parser.print_usage(sys.stderr)
        print("Error: a site URL is required (argument or SITESNAP_SITE_URL)", file=sys.stderr)
        return 1

    credentials = build_credential_provider(args.no_prompt)

    try:
        result = asyncio.run(run(config, credentials, skip_auth=args.skip_auth))
    except OutputSinkError as e:
        logger.error(f"Cannot write crawl output: {e}")
        return 1

    print_summary(result)
    print("All done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
