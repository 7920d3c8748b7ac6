# Role: Monotonic merge of newly parsed trip data into what the session already knows.
# The model often returns partial objects; a missing/null/empty incoming value never erases a known one.

from __future__ import annotations

from typing import Any, Optional

from travelbot.models.travel_data import DATA_FIELDS, CollectedTravelData, PassengerComposition


def is_present(value: Any) -> bool:
    # Key line: blank strings and empty lists count as "not collected", exactly like None.
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, list):
        return len(value) > 0
    return True


def _merge_composition(
    previous: Optional[PassengerComposition],
    incoming: Optional[PassengerComposition],
) -> Optional[PassengerComposition]:
    # Each sub-field comes from the incoming object only when the model actually answered it.
    # [] is an answer ("no children"), None is not.
    if incoming is None:
        return previous
    if previous is None:
        return incoming
    return PassengerComposition(
        adults=incoming.adults if incoming.adults is not None else previous.adults,
        children=incoming.children if incoming.children is not None else previous.children,
    )


def merge(previous: CollectedTravelData, incoming: CollectedTravelData) -> CollectedTravelData:
    # 1) Start from nothing (never mutate the inputs)
    # 2) Per field: incoming wins when present, otherwise keep previous
    merged = {}
    for name in DATA_FIELDS:
        new_value = getattr(incoming, name)
        merged[name] = new_value if is_present(new_value) else getattr(previous, name)

    merged["passenger_composition"] = _merge_composition(
        previous.passenger_composition, incoming.passenger_composition
    )

    return CollectedTravelData.model_validate(
        {name: _dump(value) for name, value in merged.items()}
    )


def _dump(value: Any) -> Any:
    # Nested models are re-validated so the result shares no mutable state with its inputs.
    if hasattr(value, "model_dump"):
        return value.model_dump(by_alias=True)
    if isinstance(value, list):
        return list(value)
    return value
