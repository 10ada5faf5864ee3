"""
Tests for the Playwright rendering session (browser fully mocked).
"""

from unittest.mock import MagicMock, patch

import pytest


class TestPlaywrightSession:
    """Test suite for PlaywrightSession class."""

    @pytest.fixture
    def playwright_mocks(self):
        """Patch sync_playwright and return the mocked objects."""
        with patch("photo_fetcher.fetchers.playwright_session.sync_playwright") as mock_sync:
            playwright = MagicMock()
            browser = MagicMock()
            context = MagicMock()
            page = MagicMock()

            mock_sync.return_value.start.return_value = playwright
            playwright.chromium.launch.return_value = browser
            browser.new_context.return_value = context
            context.new_page.return_value = page

            yield {
                'playwright': playwright,
                'browser': browser,
                'context': context,
                'page': page,
            }

    @pytest.fixture
    def session(self, playwright_mocks):
        from photo_fetcher.fetchers.playwright_session import PlaywrightSession
        return PlaywrightSession()

    def test_launch_options(self, playwright_mocks):
        """Test browser launch with headless mode and 60s timeout."""
        from photo_fetcher.fetchers.playwright_session import PlaywrightSession

        PlaywrightSession(navigation_timeout_ms=15000, user_agent="TestAgent/1.0")

        playwright_mocks['playwright'].chromium.launch.assert_called_once_with(
            headless=True, timeout=60000
        )
        playwright_mocks['browser'].new_context.assert_called_once_with(user_agent="TestAgent/1.0")
        playwright_mocks['page'].set_default_navigation_timeout.assert_called_once_with(15000)

    def test_launch_failure_stops_playwright(self, playwright_mocks):
        from photo_fetcher.fetchers.playwright_session import PlaywrightSession

        playwright_mocks['playwright'].chromium.launch.side_effect = RuntimeError("no chromium")

        with pytest.raises(RuntimeError):
            PlaywrightSession()

        playwright_mocks['playwright'].stop.assert_called_once()

    def test_navigate_waits_for_both_states(self, session, playwright_mocks):
        """Test that DOM content and network idle are both awaited."""
        page = playwright_mocks['page']

        session.navigate("http://x/1", wait_until=("domcontentloaded", "networkidle"))

        page.goto.assert_called_once_with("http://x/1", wait_until="domcontentloaded")
        page.wait_for_load_state.assert_called_once_with("networkidle")

    def test_navigate_default_state(self, session, playwright_mocks):
        session.navigate("http://x/1")

        playwright_mocks['page'].goto.assert_called_once_with("http://x/1", wait_until="load")
        playwright_mocks['page'].wait_for_load_state.assert_not_called()

    def test_first_image_source(self, session, playwright_mocks):
        """Test that the first <img> source comes from page evaluation."""
        from photo_fetcher.fetchers.playwright_session import FIRST_IMAGE_SCRIPT

        playwright_mocks['page'].evaluate.return_value = "http://cdn/a.jpg"

        assert session.first_image_source() == "http://cdn/a.jpg"
        playwright_mocks['page'].evaluate.assert_called_once_with(FIRST_IMAGE_SCRIPT)

    def test_fetch_bytes(self, session, playwright_mocks):
        response = MagicMock(ok=True)
        response.body.return_value = b"jpeg"
        playwright_mocks['page'].goto.return_value = response

        assert session.fetch_bytes("http://cdn/a.jpg") == b"jpeg"
        playwright_mocks['page'].goto.assert_called_once_with("http://cdn/a.jpg")

    def test_fetch_bytes_without_response(self, session, playwright_mocks):
        playwright_mocks['page'].goto.return_value = None

        with pytest.raises(RuntimeError, match="No response"):
            session.fetch_bytes("http://cdn/a.jpg")

    def test_fetch_bytes_http_error(self, session, playwright_mocks):
        playwright_mocks['page'].goto.return_value = MagicMock(ok=False, status=404)

        with pytest.raises(RuntimeError, match="HTTP 404"):
            session.fetch_bytes("http://cdn/a.jpg")

    def test_close(self, session, playwright_mocks):
        """Test that close shuts down the browser and Playwright."""
        session.close()

        playwright_mocks['browser'].close.assert_called_once()
        playwright_mocks['playwright'].stop.assert_called_once()

    def test_context_manager_closes(self, playwright_mocks):
        from photo_fetcher.fetchers.playwright_session import PlaywrightSession

        with PlaywrightSession():
            pass

        playwright_mocks['browser'].close.assert_called_once()
