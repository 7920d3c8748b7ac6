from travelbot.core.stage_calculator import (
    calculate_correct_stage,
    determine_next_question,
    get_completion_stats,
    is_ready_for_recommendation,
)
from travelbot.models.stage import ConversationStage, NextQuestionKey
from travelbot.models.travel_data import CollectedTravelData

FULL = {
    "origin_name": "São Paulo",
    "origin_iata": "GRU",
    "budget_in_brl": 5000,
    "passenger_composition": {"adults": 2, "children": []},
    "availability_months": ["July"],
    "activities": ["Beach"],
    "purpose": "Leisure",
}


def data(**overrides):
    values = dict(FULL)
    values.update(overrides)
    return CollectedTravelData.model_validate(values)


def test_empty_data_starts_at_origin():
    assert calculate_correct_stage(CollectedTravelData(), False) == ConversationStage.COLLECTING_ORIGIN


def test_origin_needs_name_and_code():
    assert calculate_correct_stage(data(origin_iata=None), False) == ConversationStage.COLLECTING_ORIGIN


def test_stage_follows_first_missing_field():
    assert calculate_correct_stage(data(budget_in_brl=None), False) == ConversationStage.COLLECTING_BUDGET
    assert calculate_correct_stage(data(passenger_composition=None), False) == ConversationStage.COLLECTING_PASSENGERS
    assert calculate_correct_stage(data(availability_months=None), False) == ConversationStage.COLLECTING_AVAILABILITY
    assert calculate_correct_stage(data(activities=None), False) == ConversationStage.COLLECTING_ACTIVITIES
    assert calculate_correct_stage(data(purpose=None), False) == ConversationStage.COLLECTING_PURPOSE


def test_composition_without_adults_stays_in_passengers():
    stage = calculate_correct_stage(data(passenger_composition={"adults": 0, "children": None}), False)
    assert stage == ConversationStage.COLLECTING_PASSENGERS


def test_empty_list_counts_as_missing():
    assert calculate_correct_stage(data(availability_months=[]), False) == ConversationStage.COLLECTING_AVAILABILITY


def test_earlier_gap_wins_over_later_data():
    stage = calculate_correct_stage(data(budget_in_brl=None, purpose=None), False)
    assert stage == ConversationStage.COLLECTING_BUDGET


def test_complete_data_is_recommendation_ready():
    assert calculate_correct_stage(data(), False) == ConversationStage.RECOMMENDATION_READY
    assert is_ready_for_recommendation(data())


def test_final_flag_forces_recommendation_ready():
    assert calculate_correct_stage(CollectedTravelData(), True) == ConversationStage.RECOMMENDATION_READY


def test_next_question_key():
    assert determine_next_question(CollectedTravelData()) == NextQuestionKey.ORIGIN
    assert determine_next_question(data(activities=None)) == NextQuestionKey.ACTIVITIES
    assert determine_next_question(data()) is None


def test_completion_stats():
    empty = get_completion_stats(CollectedTravelData())
    assert empty["completed"] == 0
    assert empty["total"] == 8
    assert empty["percentage"] == 0

    stats = get_completion_stats(data())
    assert stats["completed"] == 7
    assert stats["missing_fields"] == ["hobbies"]
    assert stats["percentage"] == 88
