# Rev 0.3.0
"""Error kinds raised by the project and todo managers.

Callers map ``kind`` to their own envelopes (HTTP 404 for ``not_found``,
400 for ``validation`` and ``max_depth_exceeded``). Store-level failures
(``sqlite3.Error``) are not wrapped and propagate as they are.
"""
from __future__ import annotations
from typing import Optional


class TaskTreeError(Exception):
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class NotFoundError(TaskTreeError, LookupError):
    kind = "not_found"

    def __init__(self, entity: str, entity_id: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"{entity.capitalize()} not found (id: {entity_id})")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(TaskTreeError, ValueError):
    kind = "validation"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class MaxDepthExceededError(TaskTreeError, ValueError):
    kind = "max_depth_exceeded"

    def __init__(self, message: str = "Subtasks cannot have children (maximum depth is 3: project → task → subtask)") -> None:
        super().__init__(message)
