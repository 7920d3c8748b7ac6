# Role: Pure business rules for who can fly and whether the budget covers them. Used by FlowController
# (before persisting passenger/budget data) and by the flight-search parameter builder.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from travelbot.models.travel_data import INFANT_MAX_AGE, PassengerComposition
from travelbot.utils.passenger_pricing import calculate_pricing

MAX_PASSENGERS = 9
MAX_CHILD_AGE = 17

MISSING_PASSENGER_COMPOSITION = "Passenger composition was not provided"
NO_ADULTS = "At least one adult is required on the trip"
TOO_MANY_INFANTS = "Number of infants cannot exceed the number of adults"
INVALID_CHILD_AGE_NEGATIVE = "Child age cannot be negative"
INVALID_CHILD_AGE_TOO_HIGH = f"Child age must be {MAX_CHILD_AGE} or under"
TOO_MANY_PASSENGERS = f"Maximum number of passengers exceeded (max: {MAX_PASSENGERS})"
INVALID_BUDGET = "Budget must be greater than zero"
NEGATIVE_CHILDREN = "Number of children cannot be negative"
NEGATIVE_INFANTS = "Number of infants cannot be negative"


def insufficient_budget_message(per_person: float, minimum: float) -> str:
    return (
        f"Insufficient budget. Minimum of R$ {minimum:.2f} per paying passenger; "
        f"you have R$ {per_person:.2f} per person."
    )


@dataclass(frozen=True)
class PassengerValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _result(errors: List[str]) -> PassengerValidationResult:
    return PassengerValidationResult(is_valid=not errors, errors=errors)


def validate_passenger_composition(composition: Optional[PassengerComposition]) -> PassengerValidationResult:
    # 1) Composition must exist
    # 2) Collect every violation (adults, total cap, child ages/flags, infants vs adults)
    if composition is None:
        return _result([MISSING_PASSENGER_COMPOSITION])

    errors: List[str] = []

    if composition.adult_count < 1:
        errors.append(NO_ADULTS)

    if composition.total_passengers > MAX_PASSENGERS:
        errors.append(TOO_MANY_PASSENGERS)

    for index, child in enumerate(composition.children or [], start=1):
        if child.age < 0:
            errors.append(f"Child {index}: {INVALID_CHILD_AGE_NEGATIVE}")
        elif child.age > MAX_CHILD_AGE:
            errors.append(f"Child {index}: {INVALID_CHILD_AGE_TOO_HIGH}")

        expected_is_paying = child.age > INFANT_MAX_AGE
        if child.is_paying != expected_is_paying:
            errors.append(f"Child {index}: isPaying flag is wrong for age {child.age}")

    if composition.infant_count > composition.adult_count:
        errors.append(TOO_MANY_INFANTS)

    return _result(errors)


def validate_budget_for_passengers(
    total_budget: Optional[float],
    composition: Optional[PassengerComposition],
    min_per_paying_passenger: float = 500.0,
) -> PassengerValidationResult:
    if total_budget is None or total_budget <= 0:
        return _result([INVALID_BUDGET])

    if composition is None:
        return _result([MISSING_PASSENGER_COMPOSITION])

    pricing = calculate_pricing(total_budget, composition)
    if pricing.paying_passengers < 1:
        return _result([NO_ADULTS])

    if pricing.per_person_budget < min_per_paying_passenger:
        return _result([insufficient_budget_message(pricing.per_person_budget, min_per_paying_passenger)])

    return _result([])


def validate_flight_search_params(
    adults: int,
    children: Optional[int] = None,
    infants: Optional[int] = None,
) -> PassengerValidationResult:
    errors: List[str] = []

    if adults < 1:
        errors.append(NO_ADULTS)

    if infants and infants > adults:
        errors.append(TOO_MANY_INFANTS)

    if children is not None and children < 0:
        errors.append(NEGATIVE_CHILDREN)

    if infants is not None and infants < 0:
        errors.append(NEGATIVE_INFANTS)

    total = adults + (children or 0) + (infants or 0)
    if total > MAX_PASSENGERS:
        errors.append(TOO_MANY_PASSENGERS)

    return _result(errors)
