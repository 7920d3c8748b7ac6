# Role: Deterministic "one question" builder. Maps the next missing interview field to a single
# user-facing question, used whenever the assistant must re-ask instead of trusting the model's text.

from __future__ import annotations

from typing import Optional

import travelbot.config as config
from travelbot.models.stage import NextQuestionKey


def build_clarification_question(key: Optional[NextQuestionKey]) -> str:
    if config.DEBUG:
        print("CLARIFICATION_BUILDER next_question_key:", key)

    if key is None:
        return "Would you like me to recommend a destination?"

    if key == NextQuestionKey.ORIGIN:
        return "Which city will you be departing from?"

    if key == NextQuestionKey.BUDGET:
        return "What is your total budget for the trip, in BRL?"

    if key == NextQuestionKey.PASSENGERS:
        return "How many adults will travel, and will any children come along (with their ages)?"

    if key == NextQuestionKey.AVAILABILITY:
        return "Which month(s) are you available to travel?"

    if key == NextQuestionKey.ACTIVITIES:
        return "What activities do you enjoy on a trip (beach, culture, nature, nightlife...)?"

    if key == NextQuestionKey.PURPOSE:
        return "What is the main purpose of the trip (leisure, business, family, romance...)?"

    if key == NextQuestionKey.HOBBIES:
        return "Any hobbies you'd like to fit into the trip?"

    return "Could you tell me a bit more about your trip?"
