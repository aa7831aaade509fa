import signal
import sys
import threading

from tempo_tray.assets import load_icon_assets
from tempo_tray.autostart import build_autostart
from tempo_tray.config import settings
from tempo_tray.exceptions import AssetMissingError
from tempo_tray.indicator import LoggingIndicatorDisplay
from tempo_tray.notifications import LoggingNotifier
from tempo_tray.app import TempoTrayApp
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="tray")


def main() -> int:
    """Run the tray headless until SIGINT/SIGTERM."""
    setup_logging(level=settings.log_level, job_name="tempo_tray", log_file=settings.log_file)
    logger.info("%s starting", settings.app_name, extra={"exe": sys.executable})

    try:
        icons = load_icon_assets(settings.assets_dir)
    except AssetMissingError as exc:
        logger.error("Cannot start without icons: %s", exc)
        return 1

    # Only a frozen build has a stable executable to register at login.
    exe_path = sys.executable if getattr(sys, "frozen", False) else ""
    app = TempoTrayApp.from_settings(
        settings,
        LoggingIndicatorDisplay(icons),
        LoggingNotifier(),
        autostart=build_autostart(exe_path, value_name=settings.autostart_value_name),
    )

    stop = threading.Event()

    def _handle_signal(signum, _frame):
        logger.info("Received signal %s", signum)
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    app.start()
    try:
        while not stop.wait(1.0):
            pass
    finally:
        app.on_quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
