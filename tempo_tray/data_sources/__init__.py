"""Data sources for the Tempo API."""

from .base import TempoDataSource
from .tempo_api_client import TempoApiClient

__all__ = [
    "TempoDataSource",
    "TempoApiClient",
]
