"""Shared Tempo state and its lock-guarded store."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from tempo_tray.domain import TempoColor
from tempo_tray.locks import ReadWriteLock
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="state")

TARIFF_ERROR_LABEL = "Erreur"


@dataclass(frozen=True)
class TempoState:
    """Immutable snapshot of everything shown to the user."""
    today_color: TempoColor = TempoColor.UNKNOWN
    tomorrow_color: TempoColor = TempoColor.UNKNOWN
    current_tariff: float = 0.0
    tariff_label: str = ""
    last_updated: Optional[datetime] = None


class TempoStateStore:
    """Holds the single TempoState of the process.

    Readers get snapshots under the shared lock; writers replace the snapshot
    under the exclusive lock, so a reader never observes a half-applied update.

    Publishes may carry the generation of the refresh that produced them. Once
    a forced refresh has published, results of refreshes started before it
    are discarded: they may have been served from pre-rollover cache entries.
    """

    def __init__(self, initial: Optional[TempoState] = None) -> None:
        self._state = initial or TempoState()
        self._lock = ReadWriteLock()
        self._forced_generation = 0

    def snapshot(self) -> TempoState:
        with self._lock.read():
            return self._state

    def publish(self, *, generation: Optional[int] = None, forced: bool = False, **changes) -> TempoState:
        """Apply field changes atomically and return the current snapshot.

        A publish whose `generation` is older than the newest forced publish
        is dropped and the current snapshot returned unchanged.
        """
        with self._lock.write():
            if generation is not None and generation < self._forced_generation:
                logger.info(
                    "Dropping stale refresh result (generation %d < forced %d)",
                    generation,
                    self._forced_generation,
                )
                return self._state
            self._state = replace(self._state, **changes)
            if forced and generation is not None:
                self._forced_generation = max(self._forced_generation, generation)
            return self._state
