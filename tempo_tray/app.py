"""Application facade: wires the refresh engine to the UI collaborators."""

from __future__ import annotations

import datetime as dt
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from tempo_tray.autostart import AutostartManager, UnsupportedAutostart
from tempo_tray.cache import TTLCache
from tempo_tray.config import Settings
from tempo_tray.data_sources import TempoApiClient, TempoDataSource
from tempo_tray.exceptions import AutostartError
from tempo_tray.indicator import IndicatorDisplay, StatePublisher
from tempo_tray.notifications import (
    Notifier,
    format_tariff,
    new_day_message,
    refreshed_message,
    send_notification,
    summary_message,
    tariff_message,
    today_message,
    tomorrow_message,
)
from tempo_tray.refresh import RefreshOrchestrator
from tempo_tray.scheduler import MidnightScheduler, local_now_factory
from tempo_tray.state import TempoState, TempoStateStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app")

INFO_ITEMS = ("today", "tomorrow", "tariff")


@dataclass(frozen=True)
class MenuLabels:
    """Text of the informational menu entries."""
    today: str
    tomorrow: str
    tariff: str
    tariff_tooltip: str


class TempoTrayApp:
    """Owns the state, the cache and the background tasks of the tray.

    The UI collaborator calls the `on_*` handlers and reads `snapshot()` or
    `menu_labels()`; this class never renders anything itself.
    """

    def __init__(
        self,
        source: TempoDataSource,
        display: IndicatorDisplay,
        notifier: Notifier,
        *,
        autostart: Optional[AutostartManager] = None,
        title: str = "Tempo EDF",
        refresh_workers: int = 3,
        now: Callable[[], dt.datetime] = dt.datetime.now,
    ) -> None:
        self.source = source
        self.store = TempoStateStore()
        self.orchestrator = RefreshOrchestrator(source, self.store, max_workers=refresh_workers, now=now)
        self.publisher = StatePublisher(display)
        self._publish_lock = threading.Lock()
        self.notifier = notifier
        self.autostart = autostart or UnsupportedAutostart()
        self.title = title
        self.scheduler = MidnightScheduler(self.on_midnight, now=now)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        display: IndicatorDisplay,
        notifier: Notifier,
        *,
        autostart: Optional[AutostartManager] = None,
    ) -> "TempoTrayApp":
        """Build the app with a cached HTTP client configured from `settings`."""
        client = TempoApiClient(
            TTLCache(),
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
            cache_ttl=settings.cache_ttl_seconds,
        )
        return cls(
            client,
            display,
            notifier,
            autostart=autostart,
            title=settings.app_name,
            refresh_workers=settings.refresh_workers,
            now=local_now_factory(settings.timezone),
        )

    # -- read-only accessors -------------------------------------------------

    def snapshot(self) -> TempoState:
        return self.store.snapshot()

    def menu_labels(self) -> MenuLabels:
        state = self.snapshot()
        return MenuLabels(
            today=f"Aujourd'hui : {state.today_color.label}",
            tomorrow=f"Demain : {state.tomorrow_color.label}",
            tariff=f"Tarif actuel : {format_tariff(state)}",
            tariff_tooltip=tariff_message(state),
        )

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> TempoState:
        """Initial refresh, icon and notification, then arm the midnight timer."""
        state = self._refresh_and_publish(force=False)
        send_notification(self.notifier, self.title, summary_message(state))
        self.scheduler.start()
        logger.info("Tray ready")
        return state

    def on_quit(self) -> None:
        logger.info("%s shutting down", self.title)
        self.scheduler.stop(timeout=5)
        self.orchestrator.shutdown(wait=True)
        close = getattr(self.source, "close", None)
        if close is not None:
            close()

    # -- triggers ------------------------------------------------------------

    def on_manual_refresh(self) -> TempoState:
        state = self._refresh_and_publish(force=False)
        send_notification(self.notifier, self.title, refreshed_message(state))
        return state

    def on_midnight(self) -> TempoState:
        state = self._refresh_and_publish(force=True)
        send_notification(self.notifier, self.title, new_day_message(state))
        return state

    def on_info_click(self, item: str) -> None:
        """Notify the value behind one of the informational menu entries."""
        state = self.snapshot()
        if item == "today":
            message = today_message(state)
        elif item == "tomorrow":
            message = tomorrow_message(state)
        elif item == "tariff":
            message = tariff_message(state)
        else:
            raise ValueError(f"Unknown menu item '{item}', expected one of {INFO_ITEMS}")
        send_notification(self.notifier, self.title, message)

    def on_toggle_autostart(self) -> bool:
        """Flip the autostart registration; return whether it is now enabled."""
        enabled = self.autostart.is_enabled()
        try:
            if enabled:
                self.autostart.disable()
            else:
                self.autostart.enable()
        except AutostartError as exc:
            logger.error("Autostart toggle failed: %s", exc)
            action = "la suppression du" if enabled else "l'ajout au"
            send_notification(self.notifier, self.title, f"Erreur lors de {action} démarrage")
            return enabled
        message = "Application supprimée du démarrage" if enabled else "Application ajoutée au démarrage"
        send_notification(self.notifier, self.title, message)
        return not enabled

    def _refresh_and_publish(self, *, force: bool) -> TempoState:
        self.orchestrator.refresh_all(force=force)
        # The icon follows the stored state, not whichever refresh returned last.
        with self._publish_lock:
            state = self.store.snapshot()
            self.publisher.publish(state)
        return state
