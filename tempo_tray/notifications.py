"""Notification collaborator interface and message formatting."""

from __future__ import annotations

from typing import Protocol

from tempo_tray.state import TempoState
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="notifications")


class Notifier(Protocol):
    """Delivers a desktop notification."""

    def notify(self, title: str, message: str) -> None:
        """Show `message` under `title`; may raise on delivery failure."""


class LoggingNotifier:
    """Headless notifier writing notifications to the log."""

    def notify(self, title: str, message: str) -> None:
        logger.info("[%s] %s", title, message)


def send_notification(notifier: Notifier, title: str, message: str) -> bool:
    """Deliver a notification, logging instead of raising on failure."""
    logger.debug("Sending notification", extra={"title": title, "body": message})
    try:
        notifier.notify(title, message)
    except Exception as exc:
        logger.error("Notification failed: %s", exc)
        return False
    logger.info("Notification sent: %s", title)
    return True


def format_tariff(state: TempoState) -> str:
    return f"{state.current_tariff:.3f}€/kWh"


def summary_message(state: TempoState) -> str:
    return f"Couleur d'aujourd'hui : {state.today_color.label} - Tarif : {format_tariff(state)}"


def refreshed_message(state: TempoState) -> str:
    return f"Données mises à jour : {state.today_color.label} - Tarif : {format_tariff(state)}"


def new_day_message(state: TempoState) -> str:
    return f"Nouveau jour : {state.today_color.label} - Tarif : {format_tariff(state)}"


def today_message(state: TempoState) -> str:
    return f"Aujourd'hui : {state.today_color.label}"


def tomorrow_message(state: TempoState) -> str:
    return f"Demain : {state.tomorrow_color.label}"


def tariff_message(state: TempoState) -> str:
    return f"Tarif actuel : {format_tariff(state)} - {state.tariff_label}"
