# Role: Wire contract between the model and the rest of the system. ChatbotJsonResponse is the strict JSON
# shape the model must emit (and the orchestrator re-emits); ParsedResponse is the transient parser result.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from travelbot.models.stage import ConversationStage, NextQuestionKey
from travelbot.models.travel_data import CollectedTravelData


class ChatbotJsonResponse(BaseModel):
    conversation_stage: ConversationStage
    data_collected: CollectedTravelData = Field(default_factory=CollectedTravelData)
    next_question_key: Optional[NextQuestionKey] = None
    assistant_message: str
    is_final_recommendation: bool = False

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class ParsedResponse:
    response: ChatbotJsonResponse
    # Name of the parsing strategy that produced the response (e.g. "direct_parse").
    recovered_by: str

    @property
    def is_emergency(self) -> bool:
        return self.recovered_by == "emergency_parse"
