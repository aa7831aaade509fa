"""Concurrent refresh of the three Tempo data points."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Dict, Optional

from tempo_tray.data_sources import TempoDataSource
from tempo_tray.domain import RefreshRequest, TempoColor
from tempo_tray.exceptions import TempoError
from tempo_tray.state import TARIFF_ERROR_LABEL, TempoState, TempoStateStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="refresh")


class RefreshOrchestrator:
    """Runs the today/tomorrow/tariff fetches in parallel and publishes the outcome.

    Each data point fails on its own: a failed color becomes ERROR, a failed
    tariff becomes 0 with the "Erreur" label, and the others are published as
    usual. All three outcomes are written under one exclusive lock.

    Concurrent callers are coalesced. A caller arriving while a refresh is in
    flight waits for it and gets its snapshot instead of starting another one.
    A forced refresh (cache bypass) only joins another forced refresh.

    Every refresh that actually runs takes a generation number when it starts.
    The store discards results older than the newest forced refresh, so a
    manual refresh still reading yesterday's cache cannot overwrite the
    midnight rollover when it finishes last.
    """

    def __init__(
        self,
        source: TempoDataSource,
        store: TempoStateStore,
        *,
        max_workers: int = 3,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source = source
        self.store = store
        self._now = now
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="tempo-refresh")
        self._inflight: Dict[bool, Future] = {}
        self._inflight_lock = threading.Lock()
        self._generation = 0

    def refresh_all(self, *, force: bool = False) -> TempoState:
        """Refresh every data point and return the published snapshot."""
        with self._inflight_lock:
            joined = self._inflight.get(True) if force else (self._inflight.get(False) or self._inflight.get(True))
            if joined is None:
                owner: Optional[Future] = Future()
                self._inflight[force] = owner
                self._generation += 1
                generation = self._generation
            else:
                owner = None

        if owner is None:
            logger.debug("Joining in-flight refresh", extra={"force": force})
            return joined.result()

        try:
            state = self._run(force, generation)
        except BaseException as exc:
            owner.set_exception(exc)
            raise
        else:
            owner.set_result(state)
            return state
        finally:
            with self._inflight_lock:
                self._inflight.pop(force, None)

    def _run(self, force: bool, generation: int) -> TempoState:
        use_cache = not force
        today = self._executor.submit(self._fetch_color, RefreshRequest.TODAY, use_cache)
        tomorrow = self._executor.submit(self._fetch_color, RefreshRequest.TOMORROW, use_cache)
        tariff = self._executor.submit(self._fetch_tariff, use_cache)

        today_color = today.result()
        tomorrow_color = tomorrow.result()
        current_tariff, tariff_label = tariff.result()

        state = self.store.publish(
            generation=generation,
            forced=force,
            today_color=today_color,
            tomorrow_color=tomorrow_color,
            current_tariff=current_tariff,
            tariff_label=tariff_label,
            last_updated=self._now(),
        )
        logger.info(
            "Tempo data refreshed: today=%s tomorrow=%s tariff=%.4f (%s)",
            state.today_color.label,
            state.tomorrow_color.label,
            state.current_tariff,
            state.tariff_label,
        )
        return state

    def _fetch_color(self, request: RefreshRequest, use_cache: bool) -> TempoColor:
        try:
            day = self.source.fetch_day(request, use_cache=use_cache)
        except TempoError as exc:
            logger.error("Failed to fetch %s color: %s", request.name.lower(), exc)
            return TempoColor.ERROR
        color = TempoColor.from_code(day.code_jour)
        logger.info("%s color: %s", request.name.capitalize(), color.label)
        return color

    def _fetch_tariff(self, use_cache: bool) -> tuple[float, str]:
        try:
            now = self.source.fetch_now(use_cache=use_cache)
        except TempoError as exc:
            logger.error("Failed to fetch current tariff: %s", exc)
            return 0.0, TARIFF_ERROR_LABEL
        logger.info("Current tariff: %.4f (%s)", now.tarif_kwh, now.lib_tarif)
        return now.tarif_kwh, now.lib_tarif

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; optionally wait for in-flight fetches."""
        self._executor.shutdown(wait=wait)
