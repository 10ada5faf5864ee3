"""Headless Chromium rendering session built on Playwright."""

import logging
from typing import Any, Optional, Sequence

from playwright.sync_api import sync_playwright

from .base import RenderingSession

logger = logging.getLogger(__name__)

FIRST_IMAGE_SCRIPT = """() => {
    const img = document.querySelector("img");
    return img ? img.src : null;
}"""


class PlaywrightSession(RenderingSession):
    """
    Rendering session backed by a single Chromium page.

    The browser is launched on construction and closed by close().
    """

    def __init__(
        self,
        headless: bool = True,
        launch_timeout_ms: int = 60000,
        navigation_timeout_ms: int = 30000,
        user_agent: Optional[str] = None
    ):
        """
        Launch the browser and open a page.

        Args:
            headless: Run Chromium without a window
            launch_timeout_ms: Maximum time to wait for the browser to start
            navigation_timeout_ms: Default timeout for every navigation
            user_agent: Optional user agent override for the browser context
        """
        self.navigation_timeout_ms = navigation_timeout_ms

        logger.info("Launching browser...")
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=headless,
                timeout=launch_timeout_ms
            )
            context_options = {}
            if user_agent:
                context_options['user_agent'] = user_agent
            self._context = self._browser.new_context(**context_options)
            self.page = self._context.new_page()
            self.page.set_default_navigation_timeout(navigation_timeout_ms)
        except Exception:
            self._playwright.stop()
            raise

    def navigate(self, url: str, wait_until: Sequence[str] = ()) -> None:
        states = list(wait_until)
        first_state = states.pop(0) if states else "load"

        self.page.goto(url, wait_until=first_state)
        # goto accepts a single state, wait for the rest explicitly
        for state in states:
            self.page.wait_for_load_state(state)

    def evaluate(self, script: str) -> Any:
        return self.page.evaluate(script)

    def first_image_source(self) -> Optional[str]:
        return self.evaluate(FIRST_IMAGE_SCRIPT)

    def fetch_bytes(self, url: str) -> bytes:
        response = self.page.goto(url)
        if response is None:
            raise RuntimeError(f"No response received for {url}")
        if not response.ok:
            raise RuntimeError(f"HTTP {response.status} for {url}")
        return response.body()

    def close(self):
        logger.info("Closing browser")
        try:
            self._browser.close()
        finally:
            self._playwright.stop()
