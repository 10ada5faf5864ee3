"""
Run correlation context: binds a run id to every structlog event.
"""

import uuid
from typing import Optional
import structlog


class CorrelationContext:
    """
    Context manager binding a run id and extra fields to structlog contextvars.

    Usage:
        with CorrelationContext(output_folder="images") as ctx:
            logger.info("download_run_started")  # includes run_id

    Bindings made before entering are restored on exit, so contexts nest.
    """

    def __init__(self, run_id: Optional[str] = None, **extra_context):
        """
        Initialize correlation context.

        Args:
            run_id: Run identifier (generated when omitted)
            **extra_context: Additional fields to bind
        """
        self.run_id = run_id or self._generate_run_id()
        self.extra_context = extra_context
        self._tokens = None

    @staticmethod
    def _generate_run_id() -> str:
        return f"run_{uuid.uuid4().hex[:12]}"

    def __enter__(self):
        context = {'run_id': self.run_id}
        context.update({k: v for k, v in self.extra_context.items() if v is not None})
        self._tokens = structlog.contextvars.bind_contextvars(**context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._tokens is not None:
            structlog.contextvars.reset_contextvars(**self._tokens)
            self._tokens = None
        return False
