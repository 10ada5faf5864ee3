"""
Progress tracking for download runs, with ETA estimation.
"""

import time
from typing import Any, Dict, Optional
import structlog

DOWNLOADED = "downloaded"
FAILED = "failed"
SKIPPED = "skipped"


class ProgressTracker:
    """
    Counts record outcomes over a manifest and reports progress.

    Position is measured in manifest indices, so a resumed run starts
    part-way through rather than at zero.
    """

    def __init__(
        self,
        total: int,
        start: int = 0,
        bar_width: int = 40,
        logger: Optional[Any] = None
    ):
        """
        Initialize progress tracker.

        Args:
            total: Number of records in the manifest
            start: Manifest index the run resumes from
            bar_width: Width of the text progress bar
            logger: structlog logger for progress events
        """
        self.total = total
        self.start = start
        self.position = start
        self.bar_width = bar_width
        self.logger = logger or structlog.get_logger()

        self.counts = {DOWNLOADED: 0, FAILED: 0, SKIPPED: 0}
        self.start_time = time.time()

    @property
    def visited(self) -> int:
        return sum(self.counts.values())

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return min(self.position / self.total * 100, 100.0)

    def record(self, index: int, outcome: str):
        """
        Record the outcome for a manifest index.

        Args:
            index: Manifest index just handled
            outcome: One of downloaded, failed, skipped

        Raises:
            ValueError: If outcome is unknown
        """
        if outcome not in self.counts:
            raise ValueError(f"Unknown outcome: {outcome}")

        self.counts[outcome] += 1
        self.position = index + 1

        self.logger.debug(
            "progress_update",
            index=index,
            outcome=outcome,
            position=self.position,
            total=self.total,
            percentage=round(self.percentage, 2)
        )

    def estimate_remaining(self) -> Optional[Dict[str, float]]:
        """
        Estimate remaining time from the rate so far.

        Returns:
            Dictionary with estimated_seconds and items_per_second, or None
        """
        elapsed = time.time() - self.start_time
        if elapsed <= 0 or self.visited == 0:
            return None

        items_per_second = self.visited / elapsed
        remaining = max(self.total - self.position, 0)

        return {
            'estimated_seconds': remaining / items_per_second,
            'items_per_second': items_per_second,
        }

    def get_progress_bar(self) -> str:
        filled = int(self.bar_width * (self.position / max(self.total, 1)))
        bar = '#' * filled + '-' * (self.bar_width - filled)
        return f"[{bar}] {self.percentage:.1f}% ({self.position}/{self.total})"

    def get_summary(self) -> Dict[str, Any]:
        summary = {
            'total': self.total,
            'resumed_from': self.start,
            'position': self.position,
            'downloaded': self.counts[DOWNLOADED],
            'failed': self.counts[FAILED],
            'skipped': self.counts[SKIPPED],
            'percentage': round(self.percentage, 2),
            'elapsed_seconds': round(time.time() - self.start_time, 2),
        }

        eta = self.estimate_remaining()
        if eta:
            summary['estimated_remaining_seconds'] = round(eta['estimated_seconds'], 2)

        return summary

