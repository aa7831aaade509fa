"""Start-at-login registration."""

from __future__ import annotations

import subprocess
import sys
from typing import Callable, Protocol, Sequence

from tempo_tray.exceptions import AutostartError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="autostart")

RUN_KEY = r"HKCU\SOFTWARE\Microsoft\Windows\CurrentVersion\Run"

Runner = Callable[[Sequence[str]], subprocess.CompletedProcess]


def _run(args: Sequence[str]) -> subprocess.CompletedProcess:
    return subprocess.run(list(args), capture_output=True, text=True, check=False)


class AutostartManager(Protocol):
    """Registers the application to start with the user session."""

    supported: bool

    def is_enabled(self) -> bool:
        """Return True if the application is registered."""

    def enable(self) -> None:
        """Register; raises AutostartError on failure."""

    def disable(self) -> None:
        """Unregister; raises AutostartError on failure."""


class WindowsRegistryAutostart:
    """Autostart through the per-user `Run` registry key, driven by `reg.exe`."""

    supported = True

    def __init__(self, exe_path: str, *, value_name: str = "TempoEDF", runner: Runner = _run) -> None:
        if not exe_path:
            raise AutostartError("Executable path is unknown")
        self.exe_path = exe_path
        self.value_name = value_name
        self._runner = runner

    def is_enabled(self) -> bool:
        try:
            result = self._runner(["reg", "query", RUN_KEY, "/v", self.value_name])
        except OSError as exc:
            logger.warning("Cannot query autostart entry: %s", exc)
            return False
        return result.returncode == 0

    def enable(self) -> None:
        quoted = f'"{self.exe_path}"'
        self._call(["reg", "add", RUN_KEY, "/v", self.value_name, "/t", "REG_SZ", "/d", quoted, "/f"], "add")
        logger.info("Application added to Windows startup")

    def disable(self) -> None:
        if not self.is_enabled():
            return
        self._call(["reg", "delete", RUN_KEY, "/v", self.value_name, "/f"], "delete")
        logger.info("Application removed from Windows startup")

    def _call(self, args: Sequence[str], action: str) -> None:
        try:
            result = self._runner(args)
        except OSError as exc:
            raise AutostartError(f"Autostart {action} failed: {exc}") from exc
        if result.returncode != 0:
            raise AutostartError(f"Autostart {action} failed ({result.returncode}): {(result.stderr or '').strip()}")


class UnsupportedAutostart:
    """Placeholder for platforms without an autostart implementation."""

    supported = False

    def __init__(self, platform: str = sys.platform) -> None:
        self.platform = platform

    def is_enabled(self) -> bool:
        return False

    def enable(self) -> None:
        raise AutostartError(f"Autostart is not supported on {self.platform}")

    def disable(self) -> None:
        raise AutostartError(f"Autostart is not supported on {self.platform}")


def build_autostart(exe_path: str, *, value_name: str = "TempoEDF", platform: str = sys.platform) -> AutostartManager:
    """Pick the autostart implementation for `platform`."""
    if platform.startswith("win") and exe_path:
        return WindowsRegistryAutostart(exe_path, value_name=value_name)
    logger.info("Autostart unavailable on %s", platform)
    return UnsupportedAutostart(platform)
