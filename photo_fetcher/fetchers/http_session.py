"""Plain HTTP rendering session for pages that need no JavaScript."""

import logging
from typing import Any, Optional, Sequence
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from .base import RenderingSession

logger = logging.getLogger(__name__)


class HttpSession(RenderingSession):
    """
    Rendering session using requests and BeautifulSoup.

    Load states are meaningless without a browser and are ignored; the
    document is parsed as served.
    """

    def __init__(
        self,
        timeout: float = 30,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize HTTP session.

        Args:
            timeout: Request timeout in seconds
            user_agent: Optional User-Agent header
            session: Existing requests session to reuse
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers['User-Agent'] = user_agent or 'Mozilla/5.0'
        self._soup = None
        self._page_url = None

    def navigate(self, url: str, wait_until: Sequence[str] = ()) -> None:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()

        self._page_url = response.url or url
        self._soup = BeautifulSoup(response.text, 'html.parser')

    def evaluate(self, script: str) -> Any:
        raise NotImplementedError("HttpSession cannot evaluate scripts")

    def first_image_source(self) -> Optional[str]:
        if self._soup is None:
            raise RuntimeError("No page loaded")

        img = self._soup.find('img')
        if img is None or not img.get('src'):
            return None
        return urljoin(self._page_url, img['src'])

    def fetch_bytes(self, url: str) -> bytes:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    def close(self):
        self.session.close()
