"""Derive the tray indicator from today's color and push it to the display."""

from __future__ import annotations

import threading
from typing import Optional, Protocol

from tempo_tray.domain import IndicatorState, TempoColor
from tempo_tray.state import TempoState
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="indicator")

DEFAULT_INDICATOR = IndicatorState.WHITE

_COLOR_TO_INDICATOR = {
    TempoColor.BLUE: IndicatorState.BLUE,
    TempoColor.WHITE: IndicatorState.WHITE,
    TempoColor.RED: IndicatorState.RED,
    TempoColor.UNKNOWN: DEFAULT_INDICATOR,
    TempoColor.ERROR: DEFAULT_INDICATOR,
}


def resolve_indicator(today_color: TempoColor) -> IndicatorState:
    """Map a day color to its indicator; UNKNOWN and ERROR fall back to white."""
    return _COLOR_TO_INDICATOR.get(today_color, DEFAULT_INDICATOR)


class IndicatorDisplay(Protocol):
    """Anything able to show an indicator state (tray icon, status bar...)."""

    def set_indicator(self, state: IndicatorState) -> None:
        """Show `state`."""


class LoggingIndicatorDisplay:
    """Headless display that records the indicator in the log."""

    def __init__(self, icons: Optional[dict] = None) -> None:
        self.icons = icons or {}
        self.current: Optional[IndicatorState] = None

    def set_indicator(self, state: IndicatorState) -> None:
        self.current = state
        logger.info("Indicator set to %s (%d bytes)", state.value, len(self.icons.get(state, b"")))


class StatePublisher:
    """Resolves the indicator for a snapshot and hands it to the display.

    The display is called on every publish, changed or not; the previous state
    is only kept to log transitions.
    """

    def __init__(self, display: IndicatorDisplay) -> None:
        self.display = display
        self._last: Optional[IndicatorState] = None
        self._lock = threading.Lock()

    @property
    def last(self) -> Optional[IndicatorState]:
        return self._last

    def publish(self, state: TempoState) -> IndicatorState:
        indicator = resolve_indicator(state.today_color)
        with self._lock:
            changed = indicator != self._last
            self._last = indicator
            self.display.set_indicator(indicator)
        if changed:
            logger.info("Indicator changed to %s", indicator.value)
        else:
            logger.debug("Indicator unchanged (%s)", indicator.value)
        return indicator
