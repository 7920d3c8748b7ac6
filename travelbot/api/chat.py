# Role: Thin HTTP adapter for the chat endpoints. Validates request/response shapes and delegates the entire
# conversation turn to FlowController (business logic lives in core, not in the API layer).

from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from travelbot.api.deps import flow_controller
from travelbot.utils.flight_search_builder import get_flight_search_description

router = APIRouter(prefix="/chat", tags=["chat"])


class StartSessionRequest(BaseModel):
    user_id: str
    session_id: Optional[str] = None


class StartSessionResponse(BaseModel):
    session_id: str


class MessageRequest(BaseModel):
    user_message: str


class ButtonOptionModel(BaseModel):
    label: str
    value: str


class TurnResponseModel(BaseModel):
    session_id: str
    conversation_stage: str
    collected_data: dict
    assistant_message: str
    is_final_recommendation: bool
    next_question_key: Optional[str] = None
    button_options: Optional[List[ButtonOptionModel]] = None


class EndSessionResponse(BaseModel):
    session_id: str
    collected_data: dict


class DateOptionModel(BaseModel):
    departureDate: str
    returnDate: str


class FlightParamsResponse(BaseModel):
    session_id: str
    can_search: bool
    params: Optional[dict] = None
    description: str
    date_options: List[DateOptionModel] = []


@router.post("/sessions", response_model=StartSessionResponse)
def start_session(req: StartSessionRequest) -> StartSessionResponse:
    session_id = flow_controller.start_session(req.user_id, req.session_id)
    return StartSessionResponse(session_id=session_id)


@router.post("/{session_id}/messages", response_model=TurnResponseModel)
def send_message(session_id: str, req: MessageRequest) -> TurnResponseModel:
    # 1) Forward (session_id, user_message) to the orchestrator
    # 2) Return the turn in a stable schema for UI/clients
    result = flow_controller.process_message(session_id, req.user_message)
    return TurnResponseModel(
        session_id=result.session_id,
        conversation_stage=result.conversation_stage.value,
        collected_data=result.collected_data.to_wire(),
        assistant_message=result.assistant_message,
        is_final_recommendation=result.is_final_recommendation,
        next_question_key=result.next_question_key.value if result.next_question_key else None,
        button_options=result.button_options,
    )


@router.delete("/{session_id}", response_model=EndSessionResponse)
def end_session(session_id: str) -> EndSessionResponse:
    data = flow_controller.end_session(session_id)
    return EndSessionResponse(session_id=session_id, collected_data=data.to_wire())


@router.get("/{session_id}/flight-params", response_model=FlightParamsResponse)
def flight_params(session_id: str, trip_duration_days: int = Query(7, ge=1, le=60)) -> FlightParamsResponse:
    params = flow_controller.get_flight_search_params(session_id, trip_duration_days)
    session = flow_controller.get_session(session_id)
    options = flow_controller.get_travel_date_options(session_id, trip_duration_days)
    return FlightParamsResponse(
        session_id=session_id,
        can_search=params is not None,
        params=params.model_dump(exclude_none=True) if params else None,
        description=get_flight_search_description(session.collected_data),
        date_options=[DateOptionModel(departureDate=o.departure_iso, returnDate=o.return_iso) for o in options],
    )
