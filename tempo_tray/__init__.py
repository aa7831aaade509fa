"""Tempo EDF tray: today's and tomorrow's Tempo colors and the current tariff."""

__version__ = "0.1.0"
