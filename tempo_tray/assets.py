"""Loading of the tray icon files."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict

from tempo_tray.domain import IndicatorState
from tempo_tray.exceptions import AssetMissingError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="assets")


def icon_extension(platform: str = sys.platform) -> str:
    """Windows trays want .ico files; everything else gets .png."""
    return ".ico" if platform.startswith("win") else ".png"


def load_icon_assets(assets_dir: Path, *, platform: str = sys.platform) -> Dict[IndicatorState, bytes]:
    """Read one icon per indicator state from `assets_dir`.

    Files are named after the state (`blue.ico`, `white.png`...). A missing or
    empty file raises AssetMissingError: without icons the tray is unusable.
    """
    ext = icon_extension(platform)
    icons: Dict[IndicatorState, bytes] = {}
    for state in IndicatorState:
        path = Path(assets_dir) / f"{state.value}{ext}"
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise AssetMissingError(f"Cannot read icon {path}: {exc}") from exc
        if not data:
            raise AssetMissingError(f"Icon {path} is empty")
        icons[state] = data
        logger.debug("Loaded icon", extra={"path": str(path), "size": len(data)})
    logger.info("Loaded %d icons from %s", len(icons), assets_dir)
    return icons
