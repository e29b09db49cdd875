"""Local file storage for uploaded price-list files."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path

from pricelist.config import get_settings

logger = logging.getLogger(__name__)


def _sanitize_filename(name: str) -> str:
    """Return ``name`` transformed into a filesystem-safe slug."""

    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", Path(name).name.strip())
    return cleaned.strip("_") or "upload"


def _upload_directory() -> Path:
    directory = Path(get_settings().upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def store_upload(filename: str, data: bytes) -> Path:
    """Write ``data`` under the upload directory and return its location."""

    timestamp = int(time.time() * 1000)
    destination = _upload_directory() / f"{timestamp}_{_sanitize_filename(filename)}"
    destination.write_bytes(data)
    return destination


def delete_upload(path: str | Path) -> None:
    """Delete a stored upload if it still exists."""

    try:
        Path(path).unlink()
    except FileNotFoundError:  # pragma: no cover - best effort cleanup
        return
    except OSError as exc:  # pragma: no cover - best effort cleanup
        logger.warning("Could not remove upload %s: %s", path, exc)


__all__ = ["delete_upload", "store_upload"]
