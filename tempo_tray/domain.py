"""Domain vocabulary and response schemas for the Tempo API.

Enums for day colors, indicator states and the three logical queries, plus the
Pydantic models the API payloads are decoded into. No fetching logic lives here.
"""

from __future__ import annotations

from enum import Enum
from typing import Type

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ApiModel(BaseModel):
    """Base model for API payloads; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TempoDayResponse(_ApiModel):
    """Payload of `jourTempo/today` and `jourTempo/tomorrow`.

    A missing or null `codeJour` decodes as 0, which maps to UNKNOWN.
    """
    date_jour: str = Field(default="", alias="dateJour")
    code_jour: int = Field(default=0, alias="codeJour")
    periode: str = ""

    @field_validator("code_jour", mode="before")
    @classmethod
    def _null_code_is_unknown(cls, v):
        return 0 if v is None else v


class TempoNowResponse(_ApiModel):
    """Payload of `now`: the tariff applicable at this instant.

    A missing or null `tarifKwh` decodes as 0.0.
    """
    applicable_in: int = Field(default=0, alias="applicableIn")
    code_couleur: int = Field(default=0, alias="codeCouleur")
    code_horaire: int = Field(default=0, alias="codeHoraire")
    tarif_kwh: float = Field(default=0.0, alias="tarifKwh", ge=0)
    lib_tarif: str = Field(default="", alias="libTarif")

    @field_validator("tarif_kwh", mode="before")
    @classmethod
    def _null_tariff_is_zero(cls, v):
        return 0.0 if v is None else v


class TempoColor(str, Enum):
    """Color of a Tempo day, plus the two non-color outcomes."""
    BLUE = "blue"
    WHITE = "white"
    RED = "red"
    UNKNOWN = "unknown"
    ERROR = "error"

    @classmethod
    def from_code(cls, code: int) -> "TempoColor":
        """Map an API `codeJour` to a color; unknown codes give UNKNOWN."""
        return _CODE_TO_COLOR.get(code, cls.UNKNOWN)

    @property
    def label(self) -> str:
        """French label shown to the user."""
        return _COLOR_LABELS[self]


_CODE_TO_COLOR = {
    1: TempoColor.BLUE,
    2: TempoColor.WHITE,
    3: TempoColor.RED,
}

_COLOR_LABELS = {
    TempoColor.BLUE: "BLEU",
    TempoColor.WHITE: "BLANC",
    TempoColor.RED: "ROUGE",
    TempoColor.UNKNOWN: "INCONNU",
    TempoColor.ERROR: "ERREUR",
}


class IndicatorState(str, Enum):
    """Presentation state of the tray icon."""
    BLUE = "blue"
    WHITE = "white"
    RED = "red"


class RefreshRequest(str, Enum):
    """The three logical queries against the Tempo API."""
    TODAY = "jourTempo/today"
    TOMORROW = "jourTempo/tomorrow"
    NOW = "now"

    @property
    def path(self) -> str:
        """Path relative to the API base URL."""
        return self.value

    @property
    def response_model(self) -> Type[_ApiModel]:
        """Shape the payload of this query decodes into."""
        if self is RefreshRequest.NOW:
            return TempoNowResponse
        return TempoDayResponse
