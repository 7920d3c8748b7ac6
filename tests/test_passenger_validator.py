from travelbot.core.passenger_validator import (
    INVALID_BUDGET,
    INVALID_CHILD_AGE_NEGATIVE,
    INVALID_CHILD_AGE_TOO_HIGH,
    MISSING_PASSENGER_COMPOSITION,
    NEGATIVE_CHILDREN,
    NO_ADULTS,
    TOO_MANY_INFANTS,
    TOO_MANY_PASSENGERS,
    validate_budget_for_passengers,
    validate_flight_search_params,
    validate_passenger_composition,
)
from travelbot.models.travel_data import ChildPassenger, PassengerComposition
from travelbot.utils.passenger_pricing import calculate_pricing


def composition(adults, *ages):
    return PassengerComposition(adults=adults, children=[{"age": age} for age in ages])


def test_valid_family_passes():
    result = validate_passenger_composition(composition(2, 8, 1))
    assert result.is_valid
    assert result.errors == []


def test_missing_composition():
    result = validate_passenger_composition(None)
    assert not result.is_valid
    assert result.errors == [MISSING_PASSENGER_COMPOSITION]


def test_requires_an_adult():
    result = validate_passenger_composition(PassengerComposition(adults=0, children=[]))
    assert NO_ADULTS in result.errors


def test_infants_cannot_exceed_adults():
    result = validate_passenger_composition(composition(1, 1, 2))
    assert TOO_MANY_INFANTS in result.errors


def test_child_age_bounds_have_distinct_messages():
    too_old = validate_passenger_composition(composition(1, 18))
    assert f"Child 1: {INVALID_CHILD_AGE_TOO_HIGH}" in too_old.errors

    negative = validate_passenger_composition(composition(1, -1))
    assert f"Child 1: {INVALID_CHILD_AGE_NEGATIVE}" in negative.errors


def test_paying_flag_must_match_age():
    comp = PassengerComposition(adults=1, children=[ChildPassenger(age=1, is_paying=True)])
    result = validate_passenger_composition(comp)
    assert not result.is_valid
    assert any("isPaying" in e for e in result.errors)


def test_paying_flag_defaults_from_age():
    comp = composition(2, 2, 3)
    assert [c.is_paying for c in comp.children] == [False, True]


def test_total_passenger_cap():
    result = validate_passenger_composition(composition(8, 5, 6))
    assert TOO_MANY_PASSENGERS in result.errors


def test_errors_accumulate():
    result = validate_passenger_composition(PassengerComposition(adults=0, children=[{"age": 20}]))
    assert NO_ADULTS in result.errors
    assert f"Child 1: {INVALID_CHILD_AGE_TOO_HIGH}" in result.errors


def test_budget_at_minimum_is_enough():
    assert validate_budget_for_passengers(1000, composition(2)).is_valid


def test_budget_below_minimum_reports_amounts():
    result = validate_budget_for_passengers(900, composition(2))
    assert not result.is_valid
    assert "450.00" in result.errors[0]
    assert "500.00" in result.errors[0]


def test_infants_do_not_count_for_budget():
    assert validate_budget_for_passengers(1000, composition(2, 1)).is_valid
    assert not validate_budget_for_passengers(1000, composition(2, 5)).is_valid


def test_budget_custom_minimum():
    assert not validate_budget_for_passengers(1000, composition(1), min_per_paying_passenger=1500).is_valid


def test_non_positive_budget_and_missing_composition():
    assert validate_budget_for_passengers(0, composition(1)).errors == [INVALID_BUDGET]
    assert validate_budget_for_passengers(1000, None).errors == [MISSING_PASSENGER_COMPOSITION]


def test_pricing_splits_among_paying_passengers():
    pricing = calculate_pricing(6000, composition(2, 10, 1))
    assert pricing.total_passengers == 4
    assert pricing.paying_passengers == 3
    assert pricing.non_paying_passengers == 1
    assert pricing.per_person_budget == 2000


def test_flight_search_param_rules():
    assert validate_flight_search_params(1).is_valid
    assert NO_ADULTS in validate_flight_search_params(0).errors
    assert TOO_MANY_INFANTS in validate_flight_search_params(2, 0, 3).errors
    assert NEGATIVE_CHILDREN in validate_flight_search_params(1, -1).errors
    assert TOO_MANY_PASSENGERS in validate_flight_search_params(5, 3, 2).errors
