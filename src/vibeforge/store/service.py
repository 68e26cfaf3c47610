"""Project message store.

The request layer owns projects and their messages; the workflow only reads the
latest messages of a project and writes one assistant message (optionally with a
fragment) per run.
"""

from __future__ import annotations

import json
import sqlite3
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Literal, Protocol

MessageRole = Literal["USER", "ASSISTANT"]
MessageType = Literal["RESULT", "ERROR"]


@dataclass(frozen=True)
class NewFragment:
    sandbox_url: str
    title: str
    files: dict[str, str]


@dataclass(frozen=True)
class FragmentRecord:
    id: str
    message_id: str
    sandbox_url: str
    title: str
    files: dict[str, str]
    created_at: float


@dataclass(frozen=True)
class MessageRecord:
    id: str
    project_id: str
    role: MessageRole
    type: MessageType
    content: str
    created_at: float
    fragment: FragmentRecord | None = None


class ProjectStore(Protocol):
    def recent_messages(self, project_id: str, *, limit: int) -> list[MessageRecord]:
        """Return up to `limit` messages of the project, newest first."""
        ...

    def create_message(
        self,
        project_id: str,
        *,
        content: str,
        role: MessageRole,
        type: MessageType,
        fragment: NewFragment | None = None,
    ) -> MessageRecord: ...


class SQLiteProjectStore:
    """SQLite-based project store with thread-safe access."""

    def __init__(self, db_path: str = ":memory:") -> None:
        self.db_path = db_path
        self._local = threading.local()

    @property
    def _conn(self) -> sqlite3.Connection:
        if not hasattr(self._local, "conn") or self._local.conn is None:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            self._init_db(conn)
            self._local.conn = conn
            return conn
        return self._local.conn  # type: ignore[no-any-return]

    def _init_db(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                project_id TEXT NOT NULL,
                role TEXT NOT NULL,
                type TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at REAL NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS fragments (
                id TEXT PRIMARY KEY,
                message_id TEXT NOT NULL UNIQUE REFERENCES messages(id),
                sandbox_url TEXT NOT NULL,
                title TEXT NOT NULL,
                files TEXT NOT NULL,
                created_at REAL NOT NULL
            )
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_project ON messages(project_id, created_at)")
        conn.commit()

    def create_message(
        self,
        project_id: str,
        *,
        content: str,
        role: MessageRole,
        type: MessageType,
        fragment: NewFragment | None = None,
    ) -> MessageRecord:
        now = time.time()
        message_id = uuid.uuid4().hex
        fragment_record: FragmentRecord | None = None
        with self._conn as conn:
            conn.execute(
                "INSERT INTO messages (id, project_id, role, type, content, created_at) VALUES (?, ?, ?, ?, ?, ?)",
                (message_id, project_id, role, type, content, now),
            )
            if fragment is not None:
                fragment_record = FragmentRecord(
                    id=uuid.uuid4().hex,
                    message_id=message_id,
                    sandbox_url=fragment.sandbox_url,
                    title=fragment.title,
                    files=dict(fragment.files),
                    created_at=now,
                )
                conn.execute(
                    """INSERT INTO fragments (id, message_id, sandbox_url, title, files, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        fragment_record.id,
                        message_id,
                        fragment_record.sandbox_url,
                        fragment_record.title,
                        json.dumps(fragment_record.files, ensure_ascii=False),
                        now,
                    ),
                )
        return MessageRecord(
            id=message_id,
            project_id=project_id,
            role=role,
            type=type,
            content=content,
            created_at=now,
            fragment=fragment_record,
        )

    def add_user_message(self, project_id: str, content: str) -> MessageRecord:
        return self.create_message(project_id, content=content, role="USER", type="RESULT")

    def recent_messages(self, project_id: str, *, limit: int) -> list[MessageRecord]:
        rows = self._conn.execute(
            """SELECT * FROM messages WHERE project_id = ?
            ORDER BY created_at DESC, rowid DESC LIMIT ?""",
            (project_id, limit),
        ).fetchall()
        return [self._row_to_message(row) for row in rows]

    def fragment_for(self, message_id: str) -> FragmentRecord | None:
        row = self._conn.execute("SELECT * FROM fragments WHERE message_id = ?", (message_id,)).fetchone()
        if row is None:
            return None
        return FragmentRecord(
            id=row["id"],
            message_id=row["message_id"],
            sandbox_url=row["sandbox_url"],
            title=row["title"],
            files=json.loads(row["files"]),
            created_at=row["created_at"],
        )

    def _row_to_message(self, row: sqlite3.Row) -> MessageRecord:
        return MessageRecord(
            id=row["id"],
            project_id=row["project_id"],
            role=row["role"],
            type=row["type"],
            content=row["content"],
            created_at=row["created_at"],
            fragment=self.fragment_for(row["id"]),
        )

    def close(self) -> None:
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            conn.close()
            self._local.conn = None
