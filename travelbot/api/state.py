# Role: Read-only transparency endpoint for the UI.
# Does NOT change any flow logic. Only exposes current session snapshot by session_id.

from fastapi import APIRouter
from pydantic import BaseModel

from travelbot.api.deps import flow_controller
from travelbot.core.stage_calculator import get_completion_stats

router = APIRouter(tags=["state"])


class StateSnapshot(BaseModel):
    session_id: str
    current_stage: str
    collected_data: dict
    completion: dict
    is_complete: bool
    has_recommendation: bool
    message_count: int


@router.get("/state/{session_id}", response_model=StateSnapshot)
def get_state(session_id: str) -> StateSnapshot:
    session = flow_controller.get_session(session_id)
    return StateSnapshot(
        session_id=session_id,
        current_stage=session.current_stage.value,
        collected_data=session.collected_data.to_wire(),
        completion=get_completion_stats(session.collected_data),
        is_complete=session.is_complete,
        has_recommendation=session.has_recommendation,
        message_count=len(session.messages),
    )
