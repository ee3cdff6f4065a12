"""Planned-edit threshold check guarding batch writes."""

from __future__ import annotations

DEFAULT_EDIT_THRESHOLD = 25


def detect_loop(edits: int, threshold: int = DEFAULT_EDIT_THRESHOLD) -> bool:
    """Return True when ``edits`` reaches ``threshold``."""
    return edits >= threshold


__all__ = ["DEFAULT_EDIT_THRESHOLD", "detect_loop"]
