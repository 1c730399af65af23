# src/tasktree/services/progress.py
from __future__ import annotations


def progress_percent(completed: int, total: int) -> int:
    """completed/total on a 0–100 scale, rounded half up; 0 when there is nothing to count."""
    if total <= 0:
        return 0
    # integer round-half-up: floor(completed * 100 / total + 1/2)
    return (200 * completed + total) // (2 * total)
