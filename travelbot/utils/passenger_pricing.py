# Role: Deterministic budget arithmetic over a passenger composition. Infants (age <= 2 or flagged
# non-paying) travel on an adult's lap and are excluded from the per-person split.

from __future__ import annotations

from dataclasses import dataclass

from travelbot.models.travel_data import PassengerComposition


@dataclass(frozen=True)
class PricingCalculation:
    total_passengers: int
    paying_passengers: int
    non_paying_passengers: int
    per_person_budget: float
    total_budget: float


def calculate_pricing(total_budget: float, composition: PassengerComposition) -> PricingCalculation:
    paying = composition.paying_passengers
    # Key line: guard the split; a composition with no paying passenger is rejected by the validator anyway.
    per_person = total_budget / paying if paying > 0 else 0.0
    return PricingCalculation(
        total_passengers=composition.total_passengers,
        paying_passengers=paying,
        non_paying_passengers=composition.infant_count,
        per_person_budget=per_person,
        total_budget=total_budget,
    )
