"""Script loaders: how class bodies are fetched."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

# Maps a script path to a class body (text or definition callback), or None
# when there is no body at that path.
ScriptLoader = Callable[[str], Any]


def read_script(path: str) -> str | None:
    """Default loader: read the class body from the filesystem."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError:
        return None
