"""Replay serialization: records each epoch's payload for later playback."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hexroyale.core.models import BattleRecord
    from hexroyale.engine.epoch import EpochResult

logger = logging.getLogger(__name__)


class ReplayRecorder:
    """Accumulates epoch payloads and flushes them to a JSON replay file."""

    __slots__ = ("_path", "_epochs", "_seed", "_summary")

    def __init__(self, path: str | Path, seed: int) -> None:
        self._path = Path(path)
        self._seed = seed
        self._epochs: list[dict[str, Any]] = []
        self._summary: dict[str, Any] | None = None

    def __len__(self) -> int:
        return len(self._epochs)

    def record_epoch(self, result: EpochResult) -> None:
        self._epochs.append(result.to_payload())

    def record_outcome(self, record: BattleRecord) -> None:
        from hexroyale.api.serialize import to_jsonable
        self._summary = to_jsonable(record)

    def flush(self) -> Path:
        """Write accumulated data to disk."""
        replay = {
            "version": "1.0",
            "seed": self._seed,
            "total_epochs": len(self._epochs),
            "outcome": self._summary,
            "epochs": self._epochs,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(replay, indent=2), encoding="utf-8")
        logger.info("Replay saved to %s (%d epochs)", self._path, len(self._epochs))
        return self._path
