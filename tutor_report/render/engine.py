"""
Rendering Engine Providers

Launch headless Chromium through Playwright. Two strategies:
- EmbeddedChromiumProvider: production containers, bundled binary,
  serverless argument set
- LocalChromiumProvider: development machines, locally installed browser

Every acquire() yields a fresh RenderSession that is closed on exit.
No pooling or reuse across requests.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from ..errors import EngineUnavailable, ExportFailed
from ..utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Headless, sandboxed, low-resource containers
EMBEDDED_ARGS: List[str] = [
    "--allow-pre-commit-input",
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-breakpad",
    "--disable-client-side-phishing-detection",
    "--disable-component-update",
    "--disable-default-apps",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-gpu",
    "--disable-hang-monitor",
    "--disable-ipc-flooding-protection",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
    "--disable-renderer-backgrounding",
    "--disable-sync",
    "--disable-setuid-sandbox",
    "--metrics-recording-only",
    "--mute-audio",
    "--no-default-browser-check",
    "--no-first-run",
    "--no-sandbox",
    "--no-zygote",
    "--single-process",
    "--use-gl=swiftshader",
    "--hide-scrollbars",
    # Logo image and MathJax are cross-origin
    "--disable-web-security",
    "--ignore-certificate-errors",
]

LOCAL_ARGS: List[str] = ["--no-sandbox", "--disable-setuid-sandbox"]

DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}


async def stop_driver(playwright: Playwright) -> None:
    """Stop the Playwright driver, logging instead of raising on failure."""
    try:
        await playwright.stop()
    except (PlaywrightError, OSError) as e:
        logger.warning(f"Playwright driver stop failed: {e}")


class RenderSession:
    """
    One browser + page, used for a single export.

    Usage:
        async with provider.acquire() as session:
            await session.load(html)
            pdf_bytes = await session.pdf(format="A4")
    """

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
        navigation_timeout: float = 30.0,
    ):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self.page = page
        self.navigation_timeout = navigation_timeout
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def load(self, html: str) -> None:
        """Load markup and wait until the network is idle."""
        try:
            await self.page.set_content(
                html,
                wait_until="networkidle",
                timeout=self.navigation_timeout * 1000,
            )
        except PlaywrightError as e:
            raise ExportFailed(f"Document load failed: {e}") from e

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        """Evaluate a JS expression in the page, awaiting returned promises."""
        return await self.page.evaluate(expression, arg)

    async def pdf(self, **options: Any) -> bytes:
        return await self.page.pdf(**options)

    async def close(self) -> None:
        """Close the browser and stop the driver. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._browser.close()
        except PlaywrightError as e:
            logger.warning(f"Browser close failed: {e}")
        await stop_driver(self._playwright)
        logger.debug("Render session released")


class RenderEngineProvider(ABC):
    """Strategy for obtaining a configured RenderSession."""

    name: str = "base"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @abstractmethod
    async def launch_browser(self, playwright: Playwright) -> Browser:
        """Launch Chromium with this strategy's binary and arguments."""

    def context_options(self) -> Dict[str, Any]:
        return {}

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[RenderSession]:
        """
        Launch a fresh session and guarantee it is closed on every exit path.

        Raises:
            EngineUnavailable: browser could not be resolved or launched
        """
        session = await self._open_session()
        try:
            yield session
        finally:
            await session.close()

    async def _open_session(self) -> RenderSession:
        try:
            playwright = await async_playwright().start()
        except (PlaywrightError, OSError) as e:
            logger.error(f"Playwright driver failed to start: {e}")
            raise EngineUnavailable(f"Rendering engine failed to start: {e}") from e

        browser = None
        try:
            browser = await self.launch_browser(playwright)
            context = await browser.new_context(**self.context_options())
            page = await context.new_page()
        except (PlaywrightError, OSError, EngineUnavailable) as e:
            if browser is not None:
                try:
                    await browser.close()
                except PlaywrightError as close_error:
                    logger.warning(f"Browser close after failed launch: {close_error}")
            await stop_driver(playwright)
            if isinstance(e, EngineUnavailable):
                raise
            logger.error(f"Chromium launch failed ({self.name}): {e}")
            raise EngineUnavailable(f"Rendering engine failed to launch: {e}") from e

        logger.debug(f"Render session acquired ({self.name})")
        return RenderSession(
            playwright,
            browser,
            context,
            page,
            navigation_timeout=self.settings.NAVIGATION_TIMEOUT,
        )


class EmbeddedChromiumProvider(RenderEngineProvider):
    """Bundled Chromium for production containers."""

    name = "embedded"

    def resolve_executable(self, playwright: Playwright) -> str:
        path = self.settings.CHROMIUM_EXECUTABLE_PATH or playwright.chromium.executable_path
        if not path or not Path(path).exists():
            raise EngineUnavailable(f"Chromium binary not found: {path or '<unset>'}")
        return path

    async def launch_browser(self, playwright: Playwright) -> Browser:
        executable = self.resolve_executable(playwright)
        logger.info(f"Launching embedded Chromium: {executable}")
        return await playwright.chromium.launch(
            executable_path=executable,
            headless=True,
            args=EMBEDDED_ARGS,
        )

    def context_options(self) -> Dict[str, Any]:
        return {
            "viewport": DEFAULT_VIEWPORT,
            "ignore_https_errors": True,
        }


class LocalChromiumProvider(RenderEngineProvider):
    """Locally installed Chromium for development."""

    name = "local"

    async def launch_browser(self, playwright: Playwright) -> Browser:
        return await playwright.chromium.launch(
            headless=True,
            channel=self.settings.CHROMIUM_CHANNEL,
            args=LOCAL_ARGS,
        )


def create_engine_provider(settings: Optional[Settings] = None) -> RenderEngineProvider:
    """Pick the strategy for the deployment environment."""
    settings = settings or get_settings()
    if settings.is_production:
        return EmbeddedChromiumProvider(settings)
    return LocalChromiumProvider(settings)


@lru_cache
def get_engine_provider() -> RenderEngineProvider:
    """Process-wide engine strategy, selected once."""
    provider = create_engine_provider()
    logger.info(f"Rendering engine strategy: {provider.name}")
    return provider
