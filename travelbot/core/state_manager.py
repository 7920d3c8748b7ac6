# Role: Session persistence port plus the in-memory store. The FlowController only talks to SessionStore,
# so the same orchestration runs against memory (tests, CLI) or DynamoDB (tools/dynamodb_session_store.py).

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from travelbot.models.session import ChatSession


class SessionStore(ABC):
    @abstractmethod
    def get_session(self, session_id: str) -> Optional[ChatSession]:
        """Return the stored session, or None when it does not exist (or expired)."""

    @abstractmethod
    def save_session(self, session: ChatSession) -> None:
        """Insert or replace the session."""

    @abstractmethod
    def delete_session(self, session_id: str) -> None:
        """Remove the session; deleting an unknown id is not an error."""


class InMemorySessionStore(SessionStore):
    def __init__(self, session_ttl_hours: int = 24, max_history_messages: Optional[int] = None) -> None:
        self._sessions: Dict[str, ChatSession] = {}
        self._ttl = timedelta(hours=session_ttl_hours)
        self._max_history_messages = max_history_messages

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None

        if self._is_expired(session):
            del self._sessions[session_id]
            return None

        # Key line: hand out copies so callers never mutate stored state without save_session().
        return session.model_copy(deep=True)

    def save_session(self, session: ChatSession) -> None:
        # 1) Copy (no aliasing with the caller)
        # 2) Trim to last N messages when a bound is configured
        stored = session.model_copy(deep=True)
        if self._max_history_messages and len(stored.messages) > self._max_history_messages:
            stored.messages = stored.messages[-self._max_history_messages :]
        self._sessions[stored.session_id] = stored

    def delete_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def cleanup_expired(self) -> int:
        # Role: drop inactive sessions to avoid unbounded growth (best for long-running servers).
        to_delete = [sid for sid, s in self._sessions.items() if self._is_expired(s)]
        for sid in to_delete:
            del self._sessions[sid]
        return len(to_delete)

    def __len__(self) -> int:
        return len(self._sessions)

    def _is_expired(self, session: ChatSession) -> bool:
        return (datetime.now(timezone.utc) - session.updated_at) > self._ttl
