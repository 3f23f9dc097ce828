"""
Conversation history: the store contract, a SQLite-backed store, and the
adapter that records completed text turns.

Each workspace directory has its own thread of turns. Prior turns are replayed
into the model context on later queries.
"""

import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, Union

import structlog

from tfassist.config import HISTORY_DISABLED
from tfassist.errors import TransientDependencyError
from tfassist.schemas.messages import ConversationTurn, TurnRole

logger = structlog.get_logger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS conversations (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    workspace   TEXT    NOT NULL,
    role        TEXT    NOT NULL CHECK(role IN ('user', 'assistant')),
    content     TEXT    NOT NULL,
    created_at  TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_conversations_workspace_id
    ON conversations (workspace, id);
"""

# Newest n rows by insertion order, re-ordered oldest-first for injection
_RECENT_QUERY = """
SELECT workspace, role, content, created_at FROM (
    SELECT id, workspace, role, content, created_at
    FROM   conversations
    WHERE  workspace = ?
    ORDER  BY id DESC
    LIMIT  ?
) ORDER BY id ASC
"""


class ConversationStore(Protocol):
    """
    Persists and replays conversation turns keyed by workspace.

    Implementations must be safe for concurrent use.
    """

    def append(self, workspace_key: str, role: TurnRole, content: str) -> None:
        ...

    def recent(self, workspace_key: str, n: int) -> list[ConversationTurn]:
        ...

    def close(self) -> None:
        ...


def default_db_path() -> Path:
    """Return ~/.tfassist/history.db, creating the directory if needed."""
    directory = Path.home() / ".tfassist"
    directory.mkdir(mode=0o700, parents=True, exist_ok=True)
    return directory / "history.db"


class SQLiteConversationStore:
    """ConversationStore backed by a local SQLite database."""

    def __init__(self, path: Union[str, Path] = ":memory:"):
        """
        Open (or create) the database and run the schema migration.

        Args:
            path: Database file path, or ":memory:" for tests
        """
        self.path = str(path)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            if self.path != ":memory:":
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise TransientDependencyError(f"history: open {self.path}: {e}") from e
        logger.debug("Opened conversation store", path=self.path)

    def append(self, workspace_key: str, role: TurnRole, content: str) -> None:
        """Persist a single turn for the given workspace."""
        role_value = role.value if isinstance(role, TurnRole) else str(role)
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    "INSERT INTO conversations (workspace, role, content, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (workspace_key, role_value, content, datetime.now().isoformat()),
                )
        except sqlite3.Error as e:
            raise TransientDependencyError(f"history: append: {e}") from e

    def recent(self, workspace_key: str, n: int) -> list[ConversationTurn]:
        """Return up to n most recent turns for the workspace, oldest first."""
        if n <= 0:
            return []
        try:
            with self._lock:
                rows = self._conn.execute(_RECENT_QUERY, (workspace_key, n)).fetchall()
        except sqlite3.Error as e:
            raise TransientDependencyError(f"history: recent: {e}") from e

        return [
            ConversationTurn(
                workspace_key=workspace,
                role=role,
                content=content,
                created_at=datetime.fromisoformat(created_at),
            )
            for workspace, role, content, created_at in rows
        ]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "SQLiteConversationStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_store(db_path: str) -> Optional[SQLiteConversationStore]:
    """
    Open the conversation store named by a settings value.

    Args:
        db_path: Database path, "" for the default location, "disabled" for none

    Returns:
        The opened store, or None when history is disabled.
    """
    if db_path.strip().lower() == HISTORY_DISABLED:
        return None
    return SQLiteConversationStore(db_path or default_db_path())


def record_exchange(
    store: ConversationStore,
    workspace_key: str,
    user_message: str,
    reply: str,
) -> None:
    """
    Append the user message and the assistant reply to the store.

    Failures are logged and swallowed: the caller already has its answer.
    """
    for role, content in ((TurnRole.USER, user_message), (TurnRole.ASSISTANT, reply)):
        try:
            store.append(workspace_key, role, content)
        except Exception as e:
            logger.warning("Failed to persist conversation turn", role=role.value, error=str(e))
