"""Rendering session interface and the per-record fetch pipeline."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple, Union
import logging

from ..errors import DownloadError, ImageNotFound, NavigationError, WriteError
from ..manifest import ValidRecord

logger = logging.getLogger(__name__)

# Image hosting pages often lazy-load, so wait for both
DEFAULT_WAIT_UNTIL: Tuple[str, ...] = ("domcontentloaded", "networkidle")


class RenderingSession(ABC):
    """
    A browser-like page that can be pointed at URLs one after another.

    One session is opened per run and reused for every record.
    """

    @abstractmethod
    def navigate(self, url: str, wait_until: Sequence[str] = ()) -> None:
        """
        Load a page and wait for the given load states.

        Args:
            url: Page URL
            wait_until: Load states that must all be reached
        """
        pass

    @abstractmethod
    def evaluate(self, script: str) -> Any:
        """Evaluate a script against the loaded document and return its result."""
        pass

    @abstractmethod
    def first_image_source(self) -> Optional[str]:
        """Return the resolved source URL of the first <img> on the page, or None."""
        pass

    @abstractmethod
    def fetch_bytes(self, url: str) -> bytes:
        """Load a URL directly and return the raw response body."""
        pass

    def close(self):
        """Release the underlying browser or connection pool."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class FetchPipeline:
    """
    Downloads the photo behind one manifest record.

    Steps: open the photo page, read the first image's source, load that
    image and write it as <output_folder>/<product number>.jpg. Each step
    raises its own FetchError subclass carrying the underlying message.
    """

    def __init__(
        self,
        session: RenderingSession,
        wait_until: Sequence[str] = DEFAULT_WAIT_UNTIL
    ):
        """
        Initialize fetch pipeline.

        Args:
            session: Rendering session used for every step
            wait_until: Load states required before querying the page
        """
        self.session = session
        self.wait_until = tuple(wait_until)

    def fetch(self, record: ValidRecord, output_folder: Union[str, Path]) -> Path:
        """
        Download one record's image.

        Args:
            record: Validated manifest record
            output_folder: Destination folder (must exist)

        Returns:
            Path of the written image

        Raises:
            NavigationError, ImageNotFound, DownloadError, WriteError
        """
        try:
            self.session.navigate(record.photo_url, wait_until=self.wait_until)
        except Exception as e:
            raise NavigationError(str(e)) from e

        try:
            image_url = self.session.first_image_source()
        except Exception as e:
            raise ImageNotFound(str(e)) from e
        if not image_url:
            raise ImageNotFound(f"No image element found on {record.photo_url}")

        logger.debug(f"Resolved image for {record.product_number}: {image_url}")

        try:
            body = self.session.fetch_bytes(image_url)
        except Exception as e:
            raise DownloadError(str(e)) from e
        if body is None:
            raise DownloadError(f"Empty response for {image_url}")

        image_path = Path(output_folder) / record.image_name
        try:
            image_path.write_bytes(body)
        except (OSError, ValueError) as e:
            raise WriteError(str(e)) from e

        return image_path
