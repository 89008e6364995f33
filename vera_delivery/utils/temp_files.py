"""Scratch-file helpers shared by every pipeline stage.

Each stage allocates files through :func:`temp_path`; the job that owns them
hands the accumulated list to :func:`cleanup_temp_files` exactly once at the
end, whatever the outcome.
"""

from __future__ import annotations

import logging
import secrets
import tempfile
from collections.abc import Iterable
from pathlib import Path

from vera_delivery.utils.constant import TEMP_FILE_PREFIX

logger = logging.getLogger(__name__)

__all__ = ["cleanup_temp_files", "temp_path"]


def temp_path(ext: str, prefix: str = TEMP_FILE_PREFIX) -> Path:
    """Return a fresh, unused path in the system temp directory.

    The file is not created.

    Args:
        ext: Suffix appended verbatim (include the dot, e.g. ``".mp3"`` or
            ``"-chunk0.mp3"``).
        prefix: Leading name component. Defaults to ``TEMP_FILE_PREFIX``.

    Returns:
        Path of the form ``<tmpdir>/<prefix>-<16 hex chars><ext>``.
    """
    token = secrets.token_hex(8)
    return Path(tempfile.gettempdir()) / f"{prefix}-{token}{ext}"


def cleanup_temp_files(paths: Iterable[Path | str]) -> None:
    """Delete scratch files, ignoring ones that are already gone.

    Args:
        paths: Files to remove. Duplicates are tolerated.
    """
    for path in dict.fromkeys(Path(p) for p in paths):
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.debug("Temporary path cleanup failed: %s", path, exc_info=True)
