# Role: Orchestrator for one conversation turn. It glues together:
# session store, contextual prompt, model call, response parsing, passenger/budget rules, merge, stage
# recomputation and persistence. The model proposes data; this class decides what is actually kept.

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import travelbot.config as config
from travelbot.core.data_merger import merge
from travelbot.core.errors import FlightSearchParamsInvalid, ParseFailure, SessionNotFound
from travelbot.core.fallback_handler import FallbackHandler
from travelbot.core.passenger_validator import (
    INVALID_BUDGET,
    validate_budget_for_passengers,
    validate_passenger_composition,
)
from travelbot.core.stage_calculator import calculate_correct_stage, determine_next_question
from travelbot.core.state_manager import InMemorySessionStore, SessionStore
from travelbot.llm.gemini_client import GeminiClient
from travelbot.llm.response_parser import ResponseParser
from travelbot.models.chat_response import ChatbotJsonResponse
from travelbot.models.flight import FlightSearchParams
from travelbot.models.message import Message
from travelbot.models.session import ChatSession
from travelbot.models.stage import ConversationStage, NextQuestionKey
from travelbot.models.travel_data import CollectedTravelData
from travelbot.prompts.contextual_prompt import build_contextual_prompt
from travelbot.tools.amadeus_client import AmadeusClient
from travelbot.tools.dynamodb_session_store import DynamoDBSessionStore
from travelbot.utils.button_options import ButtonOption, generate_button_options
from travelbot.utils.date_converter import (
    DEFAULT_TRIP_DURATION_DAYS,
    DateRange,
    convert_availability_to_multiple_date_ranges,
)
from travelbot.utils.flight_search_builder import build_flight_search_params

MISSING_IATA = "Origin and destination IATA codes are required to search flights"


@dataclass(frozen=True)
class TurnResponse:
    session_id: str
    conversation_stage: ConversationStage
    collected_data: CollectedTravelData
    assistant_message: str
    is_final_recommendation: bool
    next_question_key: Optional[NextQuestionKey] = None
    button_options: Optional[List[ButtonOption]] = None


def build_session_store() -> SessionStore:
    # Key line: SESSION_STORE=dynamodb switches persistence without touching the orchestrator.
    if os.getenv("SESSION_STORE", "memory").lower() == "dynamodb":
        return DynamoDBSessionStore()
    return InMemorySessionStore(session_ttl_hours=config.session_ttl_hours())


class FlowController:
    def __init__(
        self,
        session_store: Optional[SessionStore] = None,
        client: Optional[GeminiClient] = None,
        parser: Optional[ResponseParser] = None,
        fallback_handler: Optional[FallbackHandler] = None,
        flight_client: Optional[AmadeusClient] = None,
        min_budget_per_passenger: Optional[float] = None,
        history_limit: int = 10,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking; external clients are created lazily
        # so a missing GEMINI_API_KEY / Amadeus credentials only fail the call that needs them.
        self.session_store = session_store if session_store is not None else build_session_store()
        self._client = client
        self.parser = parser or ResponseParser()
        self.fallback_handler = fallback_handler or FallbackHandler()
        self._flight_client = flight_client
        self.min_budget_per_passenger = (
            min_budget_per_passenger
            if min_budget_per_passenger is not None
            else config.min_budget_per_passenger()
        )
        self.history_limit = history_limit

    def _get_client(self) -> GeminiClient:
        if self._client is None:
            self._client = GeminiClient()
        return self._client

    def _get_flight_client(self) -> AmadeusClient:
        if self._flight_client is None:
            self._flight_client = AmadeusClient()
        return self._flight_client

    def _recent_messages(self, session: ChatSession) -> List[Dict[str, str]]:
        # Role: compact history format for the model (system messages stay out of the transcript sent).
        msgs = [m for m in session.messages if m.role != "system"][-self.history_limit :]
        return [{"role": m.role, "content": m.content} for m in msgs]

    # ----------------------------
    # Session lifecycle
    # ----------------------------
    def start_session(self, user_id: str, existing_session_id: Optional[str] = None) -> str:
        # 1) Existing + owned -> reuse
        # 2) Existing + other owner -> new id (never hand over someone else's session)
        # 3) Unknown id -> create it; no id -> new uuid
        session_id = existing_session_id
        if existing_session_id:
            existing = self.session_store.get_session(existing_session_id)
            if existing is not None:
                if existing.user_id == user_id:
                    return existing.session_id
                if config.DEBUG:
                    print("SESSION OWNER MISMATCH:", existing_session_id, "-> allocating new session")
                session_id = None

        session = ChatSession(session_id=session_id or str(uuid.uuid4()), user_id=user_id)
        self.session_store.save_session(session)

        if config.DEBUG:
            print("SESSION STARTED:", session.session_id, "user:", user_id)
        return session.session_id

    def get_session(self, session_id: str) -> ChatSession:
        session = self.session_store.get_session(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def end_session(self, session_id: str) -> CollectedTravelData:
        session = self.get_session(session_id)
        self.session_store.delete_session(session_id)
        if config.DEBUG:
            print("SESSION ENDED:", session_id)
        return session.collected_data

    # ----------------------------
    # Turn
    # ----------------------------
    def process_message(self, session_id: str, user_message: str) -> TurnResponse:
        # 1) Load session, append user message (in memory only)
        # 2) Contextual prompt -> model stream, fully buffered
        # 3) Parse; unusable output -> fallback (stage and data unchanged)
        # 4) Merge, then passenger and budget rules on the merged data (failures become correction messages)
        # 5) Recompute stage, persist once, return
        session = self.get_session(session_id)
        previous_data = session.collected_data
        previous_stage = session.current_stage

        session.messages.append(Message(role="user", content=user_message))

        system_prompt = build_contextual_prompt(previous_stage, previous_data, user_message)
        raw = "".join(self._get_client().stream_text(system_prompt, self._recent_messages(session)))

        response = self._interpret(session_id, raw, previous_stage, previous_data)

        session.collected_data = response.data_collected
        session.current_stage = response.conversation_stage

        data = response.data_collected
        if response.is_final_recommendation and data.destination_name and data.destination_iata:
            session.has_recommendation = True
            session.is_complete = True
            session.completed_at = session.completed_at or datetime.now(timezone.utc)

        session.messages.append(Message(role="assistant", content=response.assistant_message, json_data=response))
        session.updated_at = datetime.now(timezone.utc)
        self.session_store.save_session(session)

        if config.DEBUG:
            print("\n--- FLOW DEBUG ---")
            print("SESSION:", session_id)
            print("USER MESSAGE:", user_message)
            print("STAGE:", previous_stage.value, "->", session.current_stage.value)
            print("COLLECTED:", data.to_wire())
            print("FINAL RECOMMENDATION:", response.is_final_recommendation)
            print("------------------\n")

        return TurnResponse(
            session_id=session_id,
            conversation_stage=response.conversation_stage,
            collected_data=data,
            assistant_message=response.assistant_message,
            is_final_recommendation=response.is_final_recommendation,
            next_question_key=response.next_question_key,
            button_options=generate_button_options(response.conversation_stage, data),
        )

    def _interpret(
        self,
        session_id: str,
        raw: str,
        previous_stage: ConversationStage,
        previous_data: CollectedTravelData,
    ) -> ChatbotJsonResponse:
        # Role: turn raw model text into the response we actually persist and show.
        try:
            parsed = self.parser.parse(raw, session_id=session_id)
        except ParseFailure as e:
            return self.fallback_handler.parse_failure(previous_stage, previous_data, str(e))

        if parsed.is_emergency:
            return self.fallback_handler.parse_failure(
                previous_stage, previous_data, "Model output was not recoverable as JSON"
            )

        proposed = parsed.response
        incoming = proposed.data_collected

        merged = merge(previous_data, incoming)

        # Key line: the merged composition is what would be persisted, so that is what gets validated.
        # An invalid one is dropped (previous kept); the rest of the turn's data still is merged.
        if incoming.passenger_composition is not None:
            check = validate_passenger_composition(merged.passenger_composition)
            if not check.is_valid:
                kept = merged.model_copy(update={"passenger_composition": previous_data.passenger_composition})
                errors = list(check.errors)
                budget_errors = self._budget_errors(kept)
                if budget_errors:
                    kept = kept.model_copy(update={"budget_in_brl": None})
                    errors.extend(budget_errors)
                return self.fallback_handler.passenger_correction(kept, errors)

        budget_errors = self._budget_errors(merged)
        if budget_errors:
            # Key line: explicit correction; the rejected budget is cleared so it is asked again.
            corrected = merged.model_copy(update={"budget_in_brl": None})
            return self.fallback_handler.budget_correction(corrected, budget_errors)

        stage = calculate_correct_stage(merged, proposed.is_final_recommendation)
        if config.DEBUG and stage != proposed.conversation_stage:
            print(f"STAGE OVERRIDE: model said {proposed.conversation_stage.value}, using {stage.value}")

        return ChatbotJsonResponse(
            conversation_stage=stage,
            data_collected=merged,
            next_question_key=determine_next_question(merged),
            assistant_message=proposed.assistant_message,
            is_final_recommendation=proposed.is_final_recommendation,
        )

    def _budget_errors(self, data: CollectedTravelData) -> List[str]:
        # Per-passenger minimum once adults are known; before that only a non-positive amount is rejected.
        if data.budget_in_brl is None:
            return []

        composition = data.passenger_composition
        if composition is not None and composition.adult_count >= 1:
            return validate_budget_for_passengers(
                data.budget_in_brl, composition, self.min_budget_per_passenger
            ).errors

        if data.budget_in_brl <= 0:
            return [INVALID_BUDGET]
        return []

    # ----------------------------
    # Flight search
    # ----------------------------
    def get_flight_search_params(
        self,
        session_id: str,
        trip_duration_days: int = DEFAULT_TRIP_DURATION_DAYS,
    ) -> Optional[FlightSearchParams]:
        session = self.get_session(session_id)
        return build_flight_search_params(session.collected_data, trip_duration_days)

    def search_flights(self, session_id: str, trip_duration_days: int = DEFAULT_TRIP_DURATION_DAYS) -> List[dict]:
        params = self.get_flight_search_params(session_id, trip_duration_days)
        if params is None:
            raise FlightSearchParamsInvalid([MISSING_IATA])
        return self._get_flight_client().search_flight_offers(params)

    def get_travel_date_options(
        self,
        session_id: str,
        trip_duration_days: int = DEFAULT_TRIP_DURATION_DAYS,
    ) -> List[DateRange]:
        # One departure/return pair per available month; the first one is what search_flights uses.
        session = self.get_session(session_id)
        return convert_availability_to_multiple_date_ranges(
            session.collected_data.availability_months, trip_duration_days
        )
