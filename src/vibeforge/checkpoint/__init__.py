"""Durable step checkpoints."""

from .runner import StepRecord, StepRunner
from .store import CheckpointFile, CheckpointStore

__all__ = ["CheckpointFile", "CheckpointStore", "StepRecord", "StepRunner"]
