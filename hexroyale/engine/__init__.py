"""Engine layer: arena lifecycle, decision workers and the epoch pipeline."""

from hexroyale.engine.arena import ArenaManager
from hexroyale.engine.epoch import EpochProcessor, EpochResult, process_epoch
from hexroyale.engine.worker_pool import WorkerPool

__all__ = ["ArenaManager", "EpochProcessor", "EpochResult", "WorkerPool", "process_epoch"]
