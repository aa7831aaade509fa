"""Interface for anything that can answer the three Tempo queries."""

from __future__ import annotations

from typing import Protocol

from tempo_tray.domain import RefreshRequest, TempoDayResponse, TempoNowResponse


class TempoDataSource(Protocol):
    """What the refresh orchestrator needs from a data source."""

    def fetch_day(self, request: RefreshRequest, *, use_cache: bool = True) -> TempoDayResponse:
        """Return the day record for TODAY or TOMORROW."""
        ...

    def fetch_now(self, *, use_cache: bool = True) -> TempoNowResponse:
        """Return the currently applicable tariff."""
        ...
