# Role: Error taxonomy for the chatbot core. Parse/validation/passenger/budget errors are recovered inside a
# turn (turned into conversational messages); SessionNotFound and ModelInvocationError reach the caller.

from __future__ import annotations

from typing import List, Optional


class TravelBotError(Exception):
    """Base class for every error raised by the chatbot core."""


class SessionNotFound(TravelBotError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class ResponseParseError(TravelBotError):
    """Raised by a single parsing strategy; the parser moves on to the next one."""


class ParseFailure(ResponseParseError):
    """Text could not be turned into JSON (or every strategy was exhausted)."""

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ValidationFailure(ResponseParseError):
    """JSON was parseable but violates the response contract."""


class PassengerCompositionInvalid(TravelBotError):
    def __init__(self, errors: List[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class BudgetInsufficient(TravelBotError):
    def __init__(self, errors: List[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class ModelInvocationError(TravelBotError):
    """The LLM call failed or returned nothing. Retries are a caller policy."""


class FlightSearchParamsInvalid(TravelBotError):
    def __init__(self, errors: List[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class FlightSearchError(TravelBotError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
