"""Load runtime overrides from a dotenv file before constants are read.

``vera_delivery.utils.constant`` calls :func:`load_project_env` at import time,
so values such as ``STT_API_KEY`` or ``TRANSCRIBE_CONCURRENCY`` can live in a
``.env`` file at repository root. ``VERA_ENV_FILE`` points at a different file
(useful when the pipeline is embedded in another service's deployment).

Variables already present in the process environment always win.
"""

from __future__ import annotations

import functools
import os
import pathlib
from collections.abc import Callable
from typing import Any, Final

from dotenv import load_dotenv

_REPO_ROOT: Final[pathlib.Path] = pathlib.Path(__file__).resolve().parents[2]
_ENV_FILE: Final[pathlib.Path] = _REPO_ROOT / ".env"
LOAD_DOTENV: Final[Callable[..., Any]] = load_dotenv

__all__ = ["env_file_path", "load_project_env"]


def env_file_path() -> pathlib.Path:
    """Return the dotenv file to read, honouring ``VERA_ENV_FILE``."""
    override = os.getenv("VERA_ENV_FILE", "").strip()
    return pathlib.Path(override).expanduser() if override else _ENV_FILE


@functools.lru_cache(maxsize=1)
def _load_once() -> pathlib.Path | None:
    path = env_file_path()
    if not path.is_file():
        return None
    LOAD_DOTENV(dotenv_path=path, override=False)
    return path


def load_project_env(force: bool = False) -> pathlib.Path | None:
    """Load the dotenv file into ``os.environ`` once per process.

    Args:
        force: Drop the cached result and read the file again.

    Returns:
        pathlib.Path | None: The file that was loaded, or ``None`` when it
        does not exist.
    """
    if force:
        _load_once.cache_clear()
    return _load_once()
