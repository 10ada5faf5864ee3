"""
Batch processing module for checkpoint-based downloading.
"""

from .checkpoint_store import Checkpoint, CheckpointStore, FailureRecord
from .batch_driver import BatchDriver, RunState

__all__ = ['Checkpoint', 'CheckpointStore', 'FailureRecord', 'BatchDriver', 'RunState']
