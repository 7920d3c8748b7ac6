# Role: DynamoDB-backed SessionStore. One item per session (partition key session_id); the full ChatSession is
# stored as a JSON payload next to a numeric "ttl" attribute so DynamoDB TTL can expire abandoned sessions.

from __future__ import annotations

import os
import time
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

import travelbot.config as config
from travelbot.core.errors import TravelBotError
from travelbot.core.state_manager import SessionStore
from travelbot.models.session import ChatSession

DEFAULT_TABLE_NAME = "chat-sessions"


class SessionStoreError(TravelBotError):
    """The backing store could not be read or written."""


class DynamoDBSessionStore(SessionStore):
    def __init__(
        self,
        table: Optional[Any] = None,
        table_name: Optional[str] = None,
        region_name: Optional[str] = None,
        session_ttl_hours: Optional[int] = None,
    ) -> None:
        # Key line: the boto3 Table is injectable so tests can pass an in-memory fake.
        if table is None:
            name = table_name or os.getenv("DYNAMODB_CHAT_SESSIONS_TABLE", DEFAULT_TABLE_NAME)
            region = region_name or os.getenv("AWS_REGION", "us-east-1")
            table = boto3.resource("dynamodb", region_name=region).Table(name)
        self.table = table
        self.ttl_seconds = (session_ttl_hours or config.session_ttl_hours()) * 3600

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        try:
            resp = self.table.get_item(Key={"session_id": session_id})
        except ClientError as e:
            raise SessionStoreError(f"Failed to load session {session_id}: {e}") from e

        item = resp.get("Item")
        if not item:
            return None

        # DynamoDB deletes expired items lazily; an item past its ttl is already gone for us.
        ttl = item.get("ttl")
        if ttl is not None and int(ttl) < int(time.time()):
            if config.DEBUG:
                print("DYNAMODB: session expired:", session_id)
            return None

        return ChatSession.model_validate_json(item["payload"])

    def save_session(self, session: ChatSession) -> None:
        item = {
            "session_id": session.session_id,
            "user_id": session.user_id,
            "current_stage": session.current_stage.value,
            "updated_at": session.updated_at.isoformat(),
            "payload": session.model_dump_json(by_alias=True),
            "ttl": int(time.time()) + self.ttl_seconds,
        }
        try:
            self.table.put_item(Item=item)
        except ClientError as e:
            raise SessionStoreError(f"Failed to save session {session.session_id}: {e}") from e

        if config.DEBUG:
            print("DYNAMODB: saved session", session.session_id, "stage:", session.current_stage.value)

    def delete_session(self, session_id: str) -> None:
        try:
            self.table.delete_item(Key={"session_id": session_id})
        except ClientError as e:
            raise SessionStoreError(f"Failed to delete session {session_id}: {e}") from e
