# Role: Deterministic recovery responses. When the model output is unusable, or the data it extracted breaks a
# business rule, we answer with a fixed structured response instead of asking the model again.

from __future__ import annotations

from typing import List

import travelbot.config as config
from travelbot.llm.response_parser import generate_fallback
from travelbot.models.chat_response import ChatbotJsonResponse
from travelbot.models.stage import ConversationStage, NextQuestionKey
from travelbot.models.travel_data import CollectedTravelData
from travelbot.utils.clarification import build_clarification_question


class FallbackHandler:
    def parse_failure(
        self,
        stage: ConversationStage,
        data: CollectedTravelData,
        error: str,
    ) -> ChatbotJsonResponse:
        # Key line: stage and data are returned untouched; the turn simply did not happen.
        return generate_fallback(stage, data, error)

    def passenger_correction(self, data: CollectedTravelData, errors: List[str]) -> ChatbotJsonResponse:
        if config.DEBUG:
            print("FALLBACK passenger_correction:", errors)

        message = (
            "There is a problem with the passenger information: "
            + " ".join(_sentence(e) for e in errors)
            + " "
            + build_clarification_question(NextQuestionKey.PASSENGERS)
        )
        return ChatbotJsonResponse(
            conversation_stage=ConversationStage.COLLECTING_PASSENGERS,
            data_collected=data,
            next_question_key=NextQuestionKey.PASSENGERS,
            assistant_message=message,
            is_final_recommendation=False,
        )

    def budget_correction(self, data: CollectedTravelData, errors: List[str]) -> ChatbotJsonResponse:
        if config.DEBUG:
            print("FALLBACK budget_correction:", errors)

        message = (
            " ".join(_sentence(e) for e in errors)
            + " Could you increase the budget or adjust the number of travelers? "
            + build_clarification_question(NextQuestionKey.BUDGET)
        )
        return ChatbotJsonResponse(
            conversation_stage=ConversationStage.COLLECTING_BUDGET,
            data_collected=data,
            next_question_key=NextQuestionKey.BUDGET,
            assistant_message=message,
            is_final_recommendation=False,
        )


def _sentence(text: str) -> str:
    text = text.strip()
    return text if text.endswith((".", "!", "?")) else text + "."
