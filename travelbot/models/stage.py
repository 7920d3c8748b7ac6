# Role: Central enums for the interview flow. Keeps the system consistent across:
# prompt building, response parsing, stage calculation, button options and the HTTP layer.

from enum import Enum


class ConversationStage(str, Enum):
    COLLECTING_ORIGIN = "collecting_origin"
    COLLECTING_BUDGET = "collecting_budget"
    COLLECTING_PASSENGERS = "collecting_passengers"
    COLLECTING_AVAILABILITY = "collecting_availability"
    COLLECTING_ACTIVITIES = "collecting_activities"
    COLLECTING_PURPOSE = "collecting_purpose"
    COLLECTING_HOBBIES = "collecting_hobbies"
    RECOMMENDATION_READY = "recommendation_ready"
    ERROR = "error"


class NextQuestionKey(str, Enum):
    ORIGIN = "origin"
    BUDGET = "budget"
    PASSENGERS = "passengers"
    AVAILABILITY = "availability"
    ACTIVITIES = "activities"
    PURPOSE = "purpose"
    HOBBIES = "hobbies"


# Canonical interview order (hobbies is optional and never blocks a recommendation).
STAGE_ORDER = (
    ConversationStage.COLLECTING_ORIGIN,
    ConversationStage.COLLECTING_BUDGET,
    ConversationStage.COLLECTING_PASSENGERS,
    ConversationStage.COLLECTING_AVAILABILITY,
    ConversationStage.COLLECTING_ACTIVITIES,
    ConversationStage.COLLECTING_PURPOSE,
    ConversationStage.COLLECTING_HOBBIES,
    ConversationStage.RECOMMENDATION_READY,
)
