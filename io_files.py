"""Helpers for writing solver outputs to disk."""

from __future__ import annotations

import os
from typing import Optional

from config import CFG


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_sides(text: str, base_dir: str, name: Optional[str] = None) -> str:
    """Write the rendered sides listing to ``name`` or the configured text file."""

    path = _resolve_output_path(base_dir, name or CFG.SIDES_OUT, "sides.txt")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(text if text else "No solution\n")
    return path


__all__ = ["write_sides"]
