# Role: Canonical trip data collected during the interview. This is the "source of truth" the rest of the
# system reads from. Every field stays None until collected; merging lives in core/data_merger.py.

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Children aged up to this (inclusive) travel as infants on an adult's lap and do not pay.
INFANT_MAX_AGE = 2


class ChildPassenger(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    age: int
    is_paying: bool = Field(alias="isPaying")

    @model_validator(mode="before")
    @classmethod
    def _default_is_paying(cls, values: Any) -> Any:
        # Key line: the model often omits the flag; derive it from the age rule.
        if isinstance(values, dict) and "isPaying" not in values and "is_paying" not in values:
            age = values.get("age")
            if isinstance(age, (int, float)) and not isinstance(age, bool):
                values = {**values, "isPaying": age > INFANT_MAX_AGE}
        return values

    @property
    def is_infant(self) -> bool:
        return self.age <= INFANT_MAX_AGE or not self.is_paying


class PassengerComposition(BaseModel):
    # None means "not answered yet" for both fields; [] means "no children".
    adults: Optional[int] = None
    children: Optional[List[ChildPassenger]] = None

    @property
    def adult_count(self) -> int:
        return self.adults or 0

    @property
    def children_count(self) -> int:
        return len(self.children or [])

    @property
    def infant_count(self) -> int:
        return sum(1 for child in self.children or [] if child.is_infant)

    @property
    def paying_children_count(self) -> int:
        return self.children_count - self.infant_count

    @property
    def total_passengers(self) -> int:
        return self.adult_count + self.children_count

    @property
    def paying_passengers(self) -> int:
        return self.adult_count + self.paying_children_count


class CollectedTravelData(BaseModel):
    origin_name: Optional[str] = None
    origin_iata: Optional[str] = None
    destination_name: Optional[str] = None
    destination_iata: Optional[str] = None

    activities: Optional[List[str]] = None
    budget_in_brl: Optional[float] = None
    passenger_composition: Optional[PassengerComposition] = None
    availability_months: Optional[List[str]] = None
    purpose: Optional[str] = None
    hobbies: Optional[List[str]] = None

    def to_wire(self) -> dict:
        # Key line: by_alias keeps the per-child "isPaying" key used on the wire and in prompts.
        return self.model_dump(mode="json", by_alias=True)


DATA_FIELDS = tuple(CollectedTravelData.model_fields.keys())
LIST_FIELDS = ("activities", "availability_months", "hobbies")
