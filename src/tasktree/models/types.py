# tasktree type definitions
# Rev 0.3.0

from __future__ import annotations
from typing import Final, Literal

# Hierarchy: (optional) project → task → subtask
TodoLevel = Literal["task", "subtask"]
TodoStatus = Literal["pending", "completed"]
ProjectStatus = Literal["active", "completed", "on_hold", "archived"]
MilestoneStatus = Literal["pending", "reached"]

LEVEL_TASK: Final = "task"
LEVEL_SUBTASK: Final = "subtask"

TODO_STATUSES: Final = ("pending", "completed")
TODO_LEVELS: Final = (LEVEL_TASK, LEVEL_SUBTASK)
PROJECT_STATUSES: Final = ("active", "completed", "on_hold", "archived")

PRIORITY_MIN: Final = 1   # highest
PRIORITY_MAX: Final = 5
PRIORITY_DEFAULT: Final = 3


class _Unset:
    """Marks a patch/filter field the caller did not supply (distinct from None)."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Unset":
        return self

    def __deepcopy__(self, memo) -> "_Unset":
        return self


UNSET: Final = _Unset()
