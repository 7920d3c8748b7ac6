# Role: Flight-search request built from a finished interview. Field names follow the flight-offers API
# query parameters so the Amadeus adapter can send them as-is.

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel


class FlightSearchParams(BaseModel):
    originLocationCode: str
    destinationLocationCode: str
    departureDate: str
    returnDate: str
    adults: int = 1
    children: Optional[int] = None
    infants: Optional[int] = None
    nonStop: bool = False
    max: int = 50

    def to_query(self) -> Dict[str, Any]:
        # Key line: children/infants are omitted entirely when there are none.
        query = self.model_dump(exclude_none=True)
        query["nonStop"] = "true" if self.nonStop else "false"
        return query
