"""
Resumable batch driver.
Walks the manifest in order from the last checkpoint, downloads each valid
record and keeps download_state.json / failed.json up to date.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import structlog

from ..errors import FetchError
from ..fetchers.base import DEFAULT_WAIT_UNTIL, FetchPipeline, RenderingSession
from ..logging import CorrelationContext, ProgressTracker
from ..logging.progress import DOWNLOADED, FAILED, SKIPPED
from ..manifest import InvalidRecord, ValidRecord, filter_record, load_manifest
from .checkpoint_store import Checkpoint, CheckpointStore, FailureRecord

logger = logging.getLogger(__name__)


@dataclass
class RunState:
    """Mutable progress of one run, owned by the driver."""

    last_processed_index: int = 0
    failures: List[FailureRecord] = field(default_factory=list)

    @classmethod
    def load(cls, store: CheckpointStore) -> 'RunState':
        checkpoint = store.load()
        return cls(
            last_processed_index=checkpoint.last_processed_index,
            failures=store.load_failures()
        )

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(last_processed_index=self.last_processed_index)

    def mark_handled(self, index: int):
        # Never move backwards within a run
        self.last_processed_index = max(self.last_processed_index, index)

    def record_failure(self, record: ValidRecord, error: str) -> FailureRecord:
        failure = FailureRecord(
            index=record.index,
            product_number=record.product_number,
            photo_url=record.photo_url,
            error=error
        )
        self.failures.append(failure)
        return failure


class BatchDriver:
    """
    Sequential, checkpointed download loop.

    Behavior:
    - Resumes AT the stored lastProcessedIndex, so the boundary record is
      processed again
    - Invalid records are skipped without touching the checkpoint or failures
    - Failed records are appended to failed.json immediately
    - Checkpoint and failures are flushed every checkpoint_interval indices
      and once more when the run ends
    - Setup errors end the run; they are logged, never raised
    """

    def __init__(
        self,
        session_factory: Callable[[], RenderingSession],
        checkpoint_interval: int = 10,
        wait_until: Sequence[str] = DEFAULT_WAIT_UNTIL,
        store_factory: Callable[[Union[str, Path]], CheckpointStore] = CheckpointStore
    ):
        """
        Initialize batch driver.

        Args:
            session_factory: Opens the rendering session for a run
            checkpoint_interval: Flush state when index % interval == 0
            wait_until: Load states required on photo pages
            store_factory: Builds the checkpoint store for an output folder

        Raises:
            ValueError: If checkpoint_interval is not positive
        """
        if checkpoint_interval <= 0:
            raise ValueError(f"checkpoint_interval must be positive, got {checkpoint_interval}")

        self.session_factory = session_factory
        self.checkpoint_interval = checkpoint_interval
        self.wait_until = tuple(wait_until)
        self.store_factory = store_factory

    def run(
        self,
        manifest_path: Union[str, Path],
        output_folder: Union[str, Path],
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Download every record of a manifest into output_folder.

        Args:
            manifest_path: JSON manifest of records
            output_folder: Destination for images and state files
            limit: Optional cap on records visited after the resume point

        Returns:
            Dictionary with run_id, status, counts and last_processed_index
        """
        output_folder = Path(output_folder)
        store = self.store_factory(output_folder)

        with CorrelationContext(output_folder=str(output_folder)) as ctx:
            struct_logger = structlog.get_logger()
            result: Dict[str, Any] = {'run_id': ctx.run_id, 'status': 'failed'}

            session = None
            state = None
            tracker = None
            try:
                session = self.session_factory()
                records = load_manifest(manifest_path)

                output_folder.mkdir(parents=True, exist_ok=True)
                state = RunState.load(store)

                tracker = ProgressTracker(
                    total=len(records),
                    start=state.last_processed_index,
                    logger=struct_logger
                )
                struct_logger.info(
                    "download_run_started",
                    manifest=str(manifest_path),
                    total=len(records),
                    resume_index=state.last_processed_index,
                    previous_failures=len(state.failures)
                )

                self._process(records, state, store, FetchPipeline(session, self.wait_until),
                              tracker, output_folder, limit)
                result['status'] = 'completed'

            except Exception as e:
                logger.exception(f"Error downloading images: {e}")
                result['error'] = str(e)

            finally:
                if state is not None:
                    self._final_flush(store, state, result)
                if session is not None:
                    self._close_session(session)

            if state is not None:
                result['last_processed_index'] = state.last_processed_index
            if tracker is not None:
                result.update({
                    'total': tracker.total,
                    'downloaded': tracker.counts[DOWNLOADED],
                    'failed': tracker.counts[FAILED],
                    'skipped': tracker.counts[SKIPPED],
                })

            progress = tracker.get_summary() if tracker is not None else None
            struct_logger.info("download_run_complete", progress=progress, **result)
            if result['status'] == 'completed':
                logger.info("All images downloaded successfully.")
            return result

    def _process(
        self,
        records: List[Any],
        state: RunState,
        store: CheckpointStore,
        pipeline: FetchPipeline,
        tracker: ProgressTracker,
        output_folder: Path,
        limit: Optional[int]
    ):
        total = len(records)
        start = state.last_processed_index
        end = total if limit is None else min(total, start + limit)

        for i in range(start, end):
            record = filter_record(records[i], i)

            if isinstance(record, InvalidRecord):
                logger.info(f"Skipping item: {i} / {total} ({record.reason})")
                tracker.record(i, SKIPPED)
            else:
                try:
                    pipeline.fetch(record, output_folder)
                except FetchError as e:
                    logger.error(f"Error downloading image ({record.photo_url}): {e}")
                    state.record_failure(record, str(e))
                    store.save_failures(state.failures)
                    tracker.record(i, FAILED)
                else:
                    logger.info(f"Index {i + 1} / {total}. Image downloaded: {record.image_name}")
                    tracker.record(i, DOWNLOADED)

                state.mark_handled(i)

            if i % self.checkpoint_interval == 0:
                self.flush(store, state)

    def flush(self, store: CheckpointStore, state: RunState):
        """Persist checkpoint and failures."""
        store.save(state.checkpoint())
        store.save_failures(state.failures)

    def _final_flush(self, store: CheckpointStore, state: RunState, result: Dict[str, Any]):
        try:
            self.flush(store, state)
        except OSError as e:
            logger.error(f"Could not save final state to {store.output_folder}: {e}")
            result['status'] = 'failed'
            result.setdefault('error', str(e))

    def _close_session(self, session: RenderingSession):
        try:
            session.close()
        except Exception as e:
            logger.warning(f"Error closing rendering session: {e}")
