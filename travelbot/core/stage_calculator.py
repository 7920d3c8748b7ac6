# Role: Single source of truth for the conversation stage. The stage is recomputed from the collected data on
# every turn; whatever stage the model claims is discarded.

from __future__ import annotations

from typing import Any, Dict, List, Optional

from travelbot.models.stage import ConversationStage, NextQuestionKey
from travelbot.models.travel_data import CollectedTravelData

_STATS_FIELDS = (
    "origin_name",
    "origin_iata",
    "budget_in_brl",
    "passenger_composition",
    "availability_months",
    "activities",
    "purpose",
    "hobbies",
)


def _filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, str)):
        return len(value) > 0
    return True


def _has_adults(data: CollectedTravelData) -> bool:
    composition = data.passenger_composition
    return composition is not None and composition.adult_count >= 1


def calculate_correct_stage(data: CollectedTravelData, is_final_recommendation: bool) -> ConversationStage:
    # Walk the canonical dependency order and stop at the first unmet requirement.
    if is_final_recommendation:
        return ConversationStage.RECOMMENDATION_READY

    if not (_filled(data.origin_name) and _filled(data.origin_iata)):
        return ConversationStage.COLLECTING_ORIGIN

    if data.budget_in_brl is None:
        return ConversationStage.COLLECTING_BUDGET

    if not _has_adults(data):
        return ConversationStage.COLLECTING_PASSENGERS

    if not _filled(data.availability_months):
        return ConversationStage.COLLECTING_AVAILABILITY

    if not _filled(data.activities):
        return ConversationStage.COLLECTING_ACTIVITIES

    if not _filled(data.purpose):
        return ConversationStage.COLLECTING_PURPOSE

    return ConversationStage.RECOMMENDATION_READY


_QUESTION_FOR_STAGE = {
    ConversationStage.COLLECTING_ORIGIN: NextQuestionKey.ORIGIN,
    ConversationStage.COLLECTING_BUDGET: NextQuestionKey.BUDGET,
    ConversationStage.COLLECTING_PASSENGERS: NextQuestionKey.PASSENGERS,
    ConversationStage.COLLECTING_AVAILABILITY: NextQuestionKey.AVAILABILITY,
    ConversationStage.COLLECTING_ACTIVITIES: NextQuestionKey.ACTIVITIES,
    ConversationStage.COLLECTING_PURPOSE: NextQuestionKey.PURPOSE,
}


def determine_next_question(data: CollectedTravelData) -> Optional[NextQuestionKey]:
    return _QUESTION_FOR_STAGE.get(calculate_correct_stage(data, False))


def is_ready_for_recommendation(data: CollectedTravelData) -> bool:
    return calculate_correct_stage(data, False) == ConversationStage.RECOMMENDATION_READY


def get_completion_stats(data: CollectedTravelData) -> Dict[str, Any]:
    completed: List[str] = []
    missing: List[str] = []
    for name in _STATS_FIELDS:
        (completed if _filled(getattr(data, name)) else missing).append(name)

    total = len(_STATS_FIELDS)
    return {
        "completed": len(completed),
        "total": total,
        "percentage": round(len(completed) * 100 / total),
        "missing_fields": missing,
    }
