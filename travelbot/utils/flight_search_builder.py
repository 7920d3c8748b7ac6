# Role: Turns a finished interview (CollectedTravelData) into FlightSearchParams. Counts come from the
# per-child list: paying children -> "children", lap infants -> "infants".

from __future__ import annotations

from datetime import date as dt_date
from typing import Optional

from travelbot.core.errors import FlightSearchParamsInvalid
from travelbot.core.passenger_validator import validate_flight_search_params
from travelbot.models.flight import FlightSearchParams
from travelbot.models.travel_data import CollectedTravelData
from travelbot.utils.date_converter import DEFAULT_TRIP_DURATION_DAYS, convert_availability_to_date_range

DEFAULT_MAX_RESULTS = 50


def can_search_flights(data: CollectedTravelData) -> bool:
    return bool(data.origin_iata and data.destination_iata)


def build_flight_search_params(
    data: CollectedTravelData,
    trip_duration_days: int = DEFAULT_TRIP_DURATION_DAYS,
    non_stop: bool = False,
    max_results: int = DEFAULT_MAX_RESULTS,
    today: Optional[dt_date] = None,
) -> Optional[FlightSearchParams]:
    # 1) Both IATA codes are required, otherwise there is nothing to search
    # 2) Dates from availability months
    # 3) Passenger counts (adults default to 1), validated before use
    if not can_search_flights(data):
        return None

    date_range = convert_availability_to_date_range(data.availability_months, trip_duration_days, today=today)

    composition = data.passenger_composition
    adults = composition.adult_count if composition and composition.adult_count > 0 else 1
    children = composition.paying_children_count if composition else 0
    infants = composition.infant_count if composition else 0

    validation = validate_flight_search_params(adults, children, infants)
    if not validation.is_valid:
        raise FlightSearchParamsInvalid(validation.errors)

    return FlightSearchParams(
        originLocationCode=data.origin_iata,
        destinationLocationCode=data.destination_iata,
        departureDate=date_range.departure_iso,
        returnDate=date_range.return_iso,
        adults=adults,
        children=children or None,
        infants=infants or None,
        nonStop=non_stop,
        max=max_results,
    )


def get_flight_search_description(data: CollectedTravelData) -> str:
    parts = []

    if data.origin_name:
        parts.append(f"Origin: {data.origin_name} ({data.origin_iata})")

    if data.destination_name:
        parts.append(f"Destination: {data.destination_name} ({data.destination_iata})")

    if data.availability_months:
        parts.append(f"Available months: {', '.join(data.availability_months)}")

    if data.budget_in_brl:
        # Key line: pt-BR currency format (R$ 5.000,00).
        formatted = f"{data.budget_in_brl:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
        parts.append(f"Budget: R$ {formatted}")

    if data.activities:
        parts.append(f"Activities: {', '.join(data.activities)}")

    if data.purpose:
        parts.append(f"Purpose: {data.purpose}")

    return " | ".join(parts)
