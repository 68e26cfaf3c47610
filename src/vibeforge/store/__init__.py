"""Project persistence collaborator."""

from .service import (
    FragmentRecord,
    MessageRecord,
    MessageRole,
    MessageType,
    NewFragment,
    ProjectStore,
    SQLiteProjectStore,
)

__all__ = [
    "FragmentRecord",
    "MessageRecord",
    "MessageRole",
    "MessageType",
    "NewFragment",
    "ProjectStore",
    "SQLiteProjectStore",
]
