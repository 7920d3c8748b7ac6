# Role: Per-session state container. Holds the evolving CollectedTravelData and the transcript,
# plus the derived stage and completion flags. Every optional substructure is an explicit field.

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from travelbot.models.message import Message
from travelbot.models.stage import ConversationStage
from travelbot.models.travel_data import CollectedTravelData


class ChatSession(BaseModel):
    session_id: str
    # Key line: owner is fixed at creation; start_session never hands this session to another user.
    user_id: str

    messages: List[Message] = Field(default_factory=list)
    collected_data: CollectedTravelData = Field(default_factory=CollectedTravelData)
    current_stage: ConversationStage = ConversationStage.COLLECTING_ORIGIN

    is_complete: bool = False
    has_recommendation: bool = False

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
