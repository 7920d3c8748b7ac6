from datetime import date

import pytest

from travelbot.core.errors import FlightSearchParamsInvalid
from travelbot.models.travel_data import CollectedTravelData
from travelbot.utils.flight_search_builder import (
    build_flight_search_params,
    can_search_flights,
    get_flight_search_description,
)

TODAY = date(2026, 3, 1)


def trip(**overrides):
    values = {
        "origin_name": "São Paulo",
        "origin_iata": "GRU",
        "destination_name": "Natal",
        "destination_iata": "NAT",
        "availability_months": ["Julho"],
    }
    values.update(overrides)
    return CollectedTravelData.model_validate(values)


def test_requires_both_airports():
    data = trip(destination_iata=None)
    assert not can_search_flights(data)
    assert build_flight_search_params(data, today=TODAY) is None


def test_defaults_to_one_adult():
    params = build_flight_search_params(trip(), today=TODAY)
    assert params.adults == 1
    assert params.departureDate == "2026-07-15"
    assert params.returnDate == "2026-07-22"
    assert params.nonStop is False
    assert params.max == 50


def test_children_and_infants_from_child_list():
    data = trip(passenger_composition={"adults": 2, "children": [{"age": 8}, {"age": 1}]})
    params = build_flight_search_params(data, today=TODAY)
    assert (params.adults, params.children, params.infants) == (2, 1, 1)


def test_query_omits_missing_counts():
    query = build_flight_search_params(trip(), trip_duration_days=3, today=TODAY).to_query()
    assert "children" not in query
    assert "infants" not in query
    assert query["nonStop"] == "false"
    assert query["returnDate"] == "2026-07-18"


def test_invalid_counts_raise():
    data = trip(passenger_composition={"adults": 1, "children": [{"age": 1}, {"age": 2}]})
    with pytest.raises(FlightSearchParamsInvalid) as exc:
        build_flight_search_params(data, today=TODAY)
    assert exc.value.errors


def test_description():
    text = get_flight_search_description(trip(budget_in_brl=5000, purpose="Leisure"))
    assert "Origin: São Paulo (GRU)" in text
    assert "Destination: Natal (NAT)" in text
    assert "Budget: R$ 5.000,00" in text
    assert text.endswith("Purpose: Leisure")
