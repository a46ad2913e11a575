"""
Login handling between the public and authenticated crawl phases.

Credentials are supplied by a CredentialProvider; how they are collected
(environment, interactive prompt, a secret store) is up to the provider.
"""
import getpass
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sitesnap.browser import PageDriver
from sitesnap.config import LoginConfig
from sitesnap.constants import LOGIN_FAILURE_SCREENSHOT

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when the login flow cannot be completed."""


@dataclass
class Credentials:
    """Username and password for the login form."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class CredentialProvider(ABC):
    """Source of login credentials."""

    @abstractmethod
    def get_credentials(self) -> Optional[Credentials]:
        """Return credentials, or None if none are available."""


class StaticCredentialProvider(CredentialProvider):
    """Credentials fixed at construction time."""

    def __init__(self, username: str, password: str):
        self._credentials = Credentials(username=username, password=password)

    def get_credentials(self) -> Optional[Credentials]:
        return self._credentials


class EnvCredentialProvider(CredentialProvider):
    """Reads SITESNAP_USERNAME / SITESNAP_PASSWORD (a .env file works too)."""

    def __init__(self, username_var: str = "SITESNAP_USERNAME", password_var: str = "SITESNAP_PASSWORD"):
        self.username_var = username_var
        self.password_var = password_var

    def get_credentials(self) -> Optional[Credentials]:
        username = os.getenv(self.username_var)
        password = os.getenv(self.password_var)
        if not username or password is None:
            return None
        return Credentials(username=username, password=password)


class PromptCredentialProvider(CredentialProvider):
    """Asks on the terminal; the password is not echoed."""

    def __init__(self, fallback: Optional[CredentialProvider] = None):
        self.fallback = fallback

    def get_credentials(self) -> Optional[Credentials]:
        if self.fallback:
            credentials = self.fallback.get_credentials()
            if credentials:
                return credentials

        try:
            username = input("Enter username: ")
            password = getpass.getpass("Enter password: ")
        except EOFError:
            logger.warning("No terminal available to prompt for credentials")
            return None

        if not username:
            return None
        return Credentials(username=username, password=password)


class Authenticator:
    """Performs the login flow on the shared page."""

    def __init__(
        self,
        config: LoginConfig,
        debug_dir: Optional[Path] = None,
        wait_until: str = "networkidle",
        navigation_timeout_ms: int = 60000,
    ):
        """
        Initialize the authenticator.

        Args:
            config: Login URL, selectors and timeouts
            debug_dir: Where to put the login failure screenshot
            wait_until: Load condition for the login page
            navigation_timeout_ms: Timeout for loading the login page
        """
        self.config = config
        self.debug_dir = Path(debug_dir) if debug_dir else None
        self.wait_until = wait_until
        self.navigation_timeout_ms = navigation_timeout_ms

    async def authenticate(self, driver: PageDriver, credentials: Optional[Credentials]) -> bool:
        """
        Log in and confirm the session is authenticated.

        Never raises: any failure is logged, a diagnostic screenshot is
        attempted, and False is returned.

        Args:
            driver: PageDriver shared with the crawl engine
            credentials: Username and password, or None

        Returns:
            True if the login was confirmed
        """
        if not self.config.login_url:
            logger.error("Login failed: no login URL configured")
            return False
        if credentials is None:
            logger.error("Login failed: no credentials supplied")
            return False

        try:
            await self._login(driver, credentials)
        except Exception as e:
            logger.error(f"Login failed: {e}")
            await self._save_failure_screenshot(driver)
            return False

        logger.info("Login successful!")
        return True

    async def _login(self, driver: PageDriver, credentials: Credentials) -> None:
        config = self.config
        logger.info(f"Navigating to login page: {config.login_url}")
        await driver.navigate(
            config.login_url,
            wait_until=self.wait_until,
            timeout_ms=self.navigation_timeout_ms,
        )

        logger.info("Entering credentials...")
        await driver.wait_for_element(
            config.username_selector, visible=True, timeout_ms=config.username_timeout_ms
        )
        await driver.type_into(config.username_selector, credentials.username)

        await driver.wait_for_element(
            config.password_selector, visible=True, timeout_ms=config.password_timeout_ms
        )
        await driver.type_into(config.password_selector, credentials.password)

        logger.info("Submitting login form...")
        await driver.click(config.submit_selector)
        await self._confirm(driver)

    async def _confirm(self, driver: PageDriver) -> None:
        """Wait for a post-login navigation or the logged-in marker.

        With a marker configured, the marker decides: a navigation timeout is
        tolerated (single-page logins often never navigate). Without one, the
        navigation itself is the confirmation.
        """
        config = self.config
        try:
            await driver.wait_for_navigation_settled(timeout_ms=config.navigation_timeout_ms)
        except Exception as e:
            if not config.success_selector:
                raise AuthenticationError(f"No navigation after login submit: {e}") from e
            logger.debug(f"No post-login navigation ({e}); checking for logged-in marker")

        if config.success_selector:
            try:
                await driver.wait_for_element(
                    config.success_selector, visible=True, timeout_ms=config.success_timeout_ms
                )
            except Exception as e:
                raise AuthenticationError(
                    f"Logged-in marker '{config.success_selector}' never appeared: {e}"
                ) from e

    async def _save_failure_screenshot(self, driver: PageDriver) -> Optional[Path]:
        """Best effort; failures here are logged and swallowed."""
        if self.debug_dir is None:
            return None
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            path = self.debug_dir / LOGIN_FAILURE_SCREENSHOT
            path.write_bytes(await driver.capture_full_page())
            logger.info(f"Screenshot of login failure saved to {path}")
            return path
        except Exception as e:
            logger.error(f"Could not take failure screenshot: {e}")
            return None
