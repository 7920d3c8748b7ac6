# Role: Builds the per-turn system prompt: global rules + current stage + already-collected data +
# a stage-specific instruction telling the model what to extract from this message.

from __future__ import annotations

import json

from travelbot.models.stage import ConversationStage
from travelbot.models.travel_data import CollectedTravelData
from travelbot.prompts.system_prompt import build_system_prompt


def _stage_instruction(stage: ConversationStage, data: CollectedTravelData) -> str:
    if stage == ConversationStage.COLLECTING_ORIGIN:
        return "Extract the city from the message, save origin_name and origin_iata, then ask for the budget."

    if stage == ConversationStage.COLLECTING_BUDGET:
        return "Extract the budget, save budget_in_brl as a number, then ask how many adults will travel."

    if stage == ConversationStage.COLLECTING_PASSENGERS:
        composition = data.passenger_composition
        if composition is None or composition.adult_count < 1:
            return "Extract the number of adults, save passenger_composition.adults, then ask about children."
        if composition.children is None:
            return (
                "Extract the children. If there are none, save children as [] and ask about availability. "
                "If there are children, ask for each child's age and save them as "
                '[{"age": number, "isPaying": boolean}].'
            )
        return "Extract the children's ages, save passenger_composition.children, then ask about availability."

    if stage == ConversationStage.COLLECTING_AVAILABILITY:
        return "Extract the month(s), save availability_months, then ask about activities."

    if stage == ConversationStage.COLLECTING_ACTIVITIES:
        return "Extract the activities, save activities, then ask about the purpose of the trip."

    if stage == ConversationStage.COLLECTING_PURPOSE:
        return (
            "Extract the purpose, save purpose, set is_final_recommendation to true, "
            "fill destination_name and destination_iata and make the recommendation."
        )

    if stage == ConversationStage.RECOMMENDATION_READY:
        return (
            "Everything is collected. Make (or refine) the final recommendation with is_final_recommendation true "
            "and destination_name/destination_iata filled."
        )

    return "Follow the normal flow described above."


def build_contextual_prompt(stage: ConversationStage, data: CollectedTravelData, user_message: str) -> str:
    # Step 1: JSON-safe snapshot of what we already know.
    collected = json.dumps(data.to_wire(), ensure_ascii=False, indent=2)

    context = f"""
CURRENT CONTEXT:
Current stage: {stage.value}
Already collected data: {collected}
User message: "{user_message}"

IMPORTANT INSTRUCTION:
{_stage_instruction(stage, data)}

CRITICAL PRESERVATION RULE:
You MUST COPY ALL the already collected data above into data_collected. Do NOT replace filled fields with null.
Only add or update data based on the user's message.

YOUR TASK:
1) Copy all already collected data into data_collected
2) Process the user's message and add/update only the new data
3) Return JSON following the rules above
""".strip()

    return f"{build_system_prompt()}\n\n{context}"
