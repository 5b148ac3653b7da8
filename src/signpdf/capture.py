"""File-backed signature capture for non-interactive use."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from signpdf.exceptions import ResourceLoadError

logger = logging.getLogger(__name__)


class FileSignatureCapture:
    """Serves a PNG read from disk the way a drawing canvas exports it."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        try:
            self._data = self._path.read_bytes()
        except OSError as e:
            raise ResourceLoadError(
                f"Cannot load signature image {self._path}: {e}"
            ) from e
        logger.debug("Loaded %d byte signature from %s", len(self._data), self._path)

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self._data).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def clear(self) -> None:
        self._data = b""
