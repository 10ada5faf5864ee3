"""
Checkpoint store for resumable download runs.
Persists the last processed manifest index and the list of failed records
as JSON side files inside the output folder.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from ..errors import CorruptCheckpoint

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "download_state.json"
FAILED_FILE_NAME = "failed.json"


@dataclass
class Checkpoint:
    """Index of the last record fully handled (downloaded or recorded as failed)."""

    last_processed_index: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {'lastProcessedIndex': self.last_processed_index}


@dataclass
class FailureRecord:
    """A record whose download failed, as written to failed.json."""

    index: int
    product_number: str
    photo_url: str
    error: str
    # Entry exactly as loaded from an earlier run, written back unchanged
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        if self.raw is not None:
            return dict(self.raw)
        return {
            'index': self.index,
            'ManufacturerProductNumber': self.product_number,
            'PhotoUrl': self.photo_url,
            'Error': self.error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FailureRecord':
        return cls(
            index=data.get('index'),
            product_number=data.get('ManufacturerProductNumber'),
            photo_url=data.get('PhotoUrl'),
            error=data.get('Error'),
            raw=dict(data),
        )


class CheckpointStore:
    """
    Reads and writes run progress for one output folder.

    Files:
    - download_state.json: {"lastProcessedIndex": <int>}
    - failed.json: pretty-printed array of failure records, only written
      when there is at least one failure
    """

    def __init__(self, output_folder: Union[str, Path]):
        """
        Initialize checkpoint store.

        Args:
            output_folder: Folder holding the images and the side files
        """
        self.output_folder = Path(output_folder)
        self.state_path = self.output_folder / STATE_FILE_NAME
        self.failed_path = self.output_folder / FAILED_FILE_NAME

    def _read_json(self, path: Path) -> Any:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise CorruptCheckpoint(f"{path} is not valid JSON: {e}") from e

    def load(self) -> Checkpoint:
        """
        Load the checkpoint, defaulting to index 0 when none exists.

        Returns:
            Stored Checkpoint

        Raises:
            CorruptCheckpoint: If the file exists but cannot be interpreted
        """
        if not self.state_path.exists():
            logger.debug(f"No checkpoint at {self.state_path}, starting at index 0")
            return Checkpoint()

        data = self._read_json(self.state_path)
        index = data.get('lastProcessedIndex') if isinstance(data, dict) else None

        # bool is an int subclass, reject it explicitly
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise CorruptCheckpoint(
                f"{self.state_path} has no valid lastProcessedIndex: {data!r}"
            )

        logger.info(f"Loaded checkpoint: lastProcessedIndex={index}")
        return Checkpoint(last_processed_index=index)

    def save(self, checkpoint: Checkpoint):
        """Overwrite the checkpoint file."""
        with open(self.state_path, 'w', encoding='utf-8') as f:
            json.dump(checkpoint.to_dict(), f)

        logger.debug(f"Checkpoint saved: lastProcessedIndex={checkpoint.last_processed_index}")

    def load_failures(self) -> List[FailureRecord]:
        """
        Load failures recorded by earlier runs.

        Returns:
            Failure records in file order, empty if no file exists

        Raises:
            CorruptCheckpoint: If the file is not a JSON array of objects
        """
        if not self.failed_path.exists():
            return []

        data = self._read_json(self.failed_path)
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise CorruptCheckpoint(f"{self.failed_path} must contain an array of objects")

        logger.info(f"Loaded {len(data)} failures from previous runs")
        return [FailureRecord.from_dict(item) for item in data]

    def save_failures(self, failures: Sequence[FailureRecord]):
        """
        Overwrite the failure file.

        An empty sequence is never written, so an existing file is left as is.
        """
        if not failures:
            return

        with open(self.failed_path, 'w', encoding='utf-8') as f:
            json.dump([failure.to_dict() for failure in failures], f, indent=2)

        logger.debug(f"Saved {len(failures)} failures to {self.failed_path}")

    def get_progress(self, total: int) -> Dict[str, Any]:
        """
        Summarize stored progress against a manifest size.

        Args:
            total: Number of records in the manifest

        Returns:
            Dictionary with resume index, percentage and failure count
        """
        checkpoint = self.load()
        failures = self.load_failures()

        resume_index = checkpoint.last_processed_index
        handled = min(resume_index + 1, total) if self.state_path.exists() else 0
        percentage = (handled / total * 100) if total > 0 else 0

        return {
            'resume_index': resume_index,
            'records_handled': handled,
            'records_remaining': total - handled,
            'failed': len(failures),
            'total': total,
            'percentage': round(percentage, 2),
        }
