# Role: Single chat message schema for the session transcript. Assistant messages carry the structured
# response they were built from (json_data) so the history can be replayed/inspected.

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

from travelbot.models.chat_response import ChatbotJsonResponse

Role = Literal["user", "assistant", "system"]


class Message(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    json_data: Optional[ChatbotJsonResponse] = None
