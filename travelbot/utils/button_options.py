# Role: Quick-reply buttons for the passenger step. Generated server-side from the session state;
# whatever the model sends as button_options is discarded by the parser.

from __future__ import annotations

from typing import Dict, List, Optional

from travelbot.models.stage import ConversationStage
from travelbot.models.travel_data import CollectedTravelData

ButtonOption = Dict[str, str]

ADULT_OPTIONS: List[ButtonOption] = [
    {"label": "1 adult", "value": "1"},
    {"label": "2 adults", "value": "2"},
    {"label": "3 adults", "value": "3"},
    {"label": "4 adults", "value": "4"},
]

CHILDREN_OPTIONS: List[ButtonOption] = [
    {"label": "No children", "value": "0"},
    {"label": "1 child", "value": "1"},
    {"label": "2 children", "value": "2"},
    {"label": "3 children", "value": "3"},
]


def generate_button_options(
    stage: ConversationStage,
    data: CollectedTravelData,
) -> Optional[List[ButtonOption]]:
    # 1) Only the passenger step has buttons
    # 2) Adults not answered -> adult options; adults known but children not -> children options
    if stage != ConversationStage.COLLECTING_PASSENGERS:
        return None

    composition = data.passenger_composition
    if composition is None or composition.adult_count < 1:
        return [dict(option) for option in ADULT_OPTIONS]

    if composition.children is None:
        return [dict(option) for option in CHILDREN_OPTIONS]

    return None
