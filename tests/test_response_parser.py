import json

import pytest

from travelbot.core.errors import ParseFailure, ValidationFailure
from travelbot.llm.response_parser import (
    EMERGENCY_ASSISTANT_MESSAGE,
    FALLBACK_ASSISTANT_MESSAGE,
    PARSE_FALLBACK_MESSAGE,
    ResponseParser,
    direct_parse,
    emergency_parse,
    generate_fallback,
    sanitize_assistant_message,
    sanitize_response,
    validate_parsed_data,
)
from travelbot.models.stage import ConversationStage, NextQuestionKey
from travelbot.models.travel_data import CollectedTravelData


@pytest.fixture
def parser():
    return ResponseParser()


def test_clean_json_uses_direct_parse(parser, reply):
    raw = reply("collecting_budget", "What is your budget?", origin_name="São Paulo", origin_iata="GRU")

    parsed = parser.parse(raw)

    assert parsed.recovered_by == "direct_parse"
    assert not parsed.is_emergency
    assert parsed.response.conversation_stage == ConversationStage.COLLECTING_BUDGET
    assert parsed.response.data_collected.origin_iata == "GRU"
    assert parsed.response.assistant_message == "What is your budget?"


def test_fenced_json_with_prefix(parser, reply):
    raw = "Here's the JSON:\n```json\n" + reply("collecting_budget", "What is your budget?") + "\n```"

    parsed = parser.parse(raw)

    assert not parsed.is_emergency
    assert parsed.response.assistant_message == "What is your budget?"


def test_json_embedded_in_prose(parser, reply):
    raw = "Sure! Here is my answer " + reply("collecting_budget", "What is your budget?") + " Hope it helps"

    parsed = parser.parse(raw)

    assert parsed.recovered_by == "extract_json_from_text"
    assert parsed.response.conversation_stage == ConversationStage.COLLECTING_BUDGET


def test_trailing_commas_are_repaired(parser):
    raw = (
        '{"conversation_stage":"collecting_passengers","data_collected":{"origin_name":"Recife",'
        '"origin_iata":"REC","budget_in_brl":5000,},"next_question_key":"passengers",'
        '"assistant_message":"How many adults will travel?","is_final_recommendation":false,}'
    )

    parsed = parser.parse(raw)

    assert parsed.recovered_by == "fix_common_issues_and_parse"
    assert parsed.response.data_collected.budget_in_brl == 5000
    assert parsed.response.data_collected.origin_iata == "REC"


def test_repairs_leave_message_text_alone(parser):
    raw = (
        '{"conversation_stage":"collecting_origin","data_collected":{"budget_in_brl":4000},'
        '"assistant_message":"Great, next: where are you flying from?","is_final_recommendation":false,}'
    )

    parsed = parser.parse(raw)

    assert parsed.recovered_by == "fix_common_issues_and_parse"
    assert parsed.response.assistant_message == "Great, next: where are you flying from?"
    assert parsed.response.data_collected.budget_in_brl == 4000


def test_bare_keys_are_quoted_outside_strings(parser):
    raw = '{conversation_stage: "collecting_origin", assistant_message: "Hi, where: are you leaving from?"}'

    parsed = parser.parse(raw)

    assert parsed.recovered_by == "fix_common_issues_and_parse"
    assert parsed.response.assistant_message == "Hi, where: are you leaving from?"


def test_single_quoted_json_is_repaired(parser):
    raw = "{'conversation_stage': 'collecting_origin', 'assistant_message': 'Where are you flying from?'}"

    parsed = parser.parse(raw)

    assert parsed.recovered_by == "fix_common_issues_and_parse"
    assert parsed.response.data_collected == CollectedTravelData()
    assert parsed.response.is_final_recommendation is False


def test_pretty_printed_escaped_output(parser, reply):
    pretty = json.dumps(json.loads(reply("collecting_budget", "What is your budget?")), indent=2)
    raw = pretty.replace("\n", "\\n")

    parsed = parser.parse(raw)

    assert not parsed.is_emergency
    assert parsed.response.assistant_message == "What is your budget?"


def test_garbage_falls_through_to_emergency(parser):
    parsed = parser.parse("I could not produce JSON this time. Sorry about that")

    assert parsed.is_emergency
    assert parsed.response.conversation_stage == ConversationStage.COLLECTING_ORIGIN
    assert parsed.response.data_collected == CollectedTravelData()
    assert parsed.response.assistant_message == "I could not produce JSON this time."


def test_emergency_uses_truncated_assistant_message():
    response = emergency_parse('{"conversation_stage":"collecting_budget","assistant_message":"Which city are you leaving from?"')
    assert response.assistant_message == "Which city are you leaving from?"


def test_emergency_default_message():
    assert emergency_parse("??? !!!").assistant_message == EMERGENCY_ASSISTANT_MESSAGE


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_output_raises_parse_failure(parser, raw):
    with pytest.raises(ParseFailure) as exc:
        parser.parse(raw)
    assert len(exc.value.errors) == 5


def test_direct_parse_rejects_non_json():
    with pytest.raises(ParseFailure):
        direct_parse("not json")


def test_final_recommendation_requires_destination(parser, reply):
    raw = reply("recommendation_ready", "Go to Natal!", is_final=True)

    with pytest.raises(ValidationFailure):
        validate_parsed_data(json.loads(raw))

    assert parser.parse(raw).is_emergency


def test_final_recommendation_with_destination(reply):
    raw = reply("recommendation_ready", "Go to Natal!", is_final=True, destination_name="Natal", destination_iata="NAT")
    response = validate_parsed_data(json.loads(raw))
    assert response.is_final_recommendation
    assert response.data_collected.destination_iata == "NAT"


def test_missing_optional_top_level_fields_are_defaulted():
    response = validate_parsed_data({"conversation_stage": "collecting_origin", "assistant_message": "Where from?"})
    assert response.data_collected == CollectedTravelData()
    assert response.is_final_recommendation is False
    assert response.next_question_key is None


@pytest.mark.parametrize(
    "payload",
    [
        {"conversation_stage": "collecting_origin"},
        {"assistant_message": "Hi there"},
        {"conversation_stage": "somewhere_else", "assistant_message": "Hi there"},
        {"conversation_stage": "collecting_budget", "assistant_message": "Hi there", "is_final_recommendation": "yes"},
        {"conversation_stage": "collecting_budget", "assistant_message": "Hi", "data_collected": {"budget_in_brl": "5000"}},
        {"conversation_stage": "collecting_budget", "assistant_message": "Hi", "data_collected": {"activities": "Beach"}},
        {"conversation_stage": "collecting_budget", "assistant_message": "Hi", "data_collected": []},
        ["not", "an", "object"],
    ],
)
def test_contract_violations(payload):
    with pytest.raises(ValidationFailure):
        validate_parsed_data(payload)


def test_unknown_next_question_key_becomes_null():
    response = validate_parsed_data(
        {"conversation_stage": "collecting_origin", "assistant_message": "Where from?", "next_question_key": "weather"}
    )
    assert response.next_question_key is None

    response = validate_parsed_data(
        {"conversation_stage": "collecting_origin", "assistant_message": "Where from?", "next_question_key": "origin"}
    )
    assert response.next_question_key == NextQuestionKey.ORIGIN


def test_iata_codes_are_normalised():
    response = validate_parsed_data(
        {
            "conversation_stage": "collecting_budget",
            "assistant_message": "Budget?",
            "data_collected": {"origin_name": "Recife", "origin_iata": " rec "},
        }
    )
    assert response.data_collected.origin_iata == "REC"


def test_legacy_children_count():
    def children_for(value):
        response = validate_parsed_data(
            {
                "conversation_stage": "collecting_passengers",
                "assistant_message": "Ages?",
                "data_collected": {"passenger_composition": {"adults": 2, "children": value}},
            }
        )
        return response.data_collected.passenger_composition.children

    assert children_for(0) == []
    assert children_for(2) is None


def test_children_list_gets_paying_flag_from_age():
    response = validate_parsed_data(
        {
            "conversation_stage": "collecting_passengers",
            "assistant_message": "Thanks!",
            "data_collected": {"passenger_composition": {"adults": 2, "children": [{"age": 1}, {"age": 9}]}},
        }
    )
    children = response.data_collected.passenger_composition.children
    assert [(c.age, c.is_paying) for c in children] == [(1, False), (9, True)]


def test_children_without_adults_leaves_adults_unanswered():
    response = validate_parsed_data(
        {
            "conversation_stage": "collecting_passengers",
            "assistant_message": "Thanks!",
            "data_collected": {"passenger_composition": {"children": [{"age": 5}]}},
        }
    )
    composition = response.data_collected.passenger_composition
    assert composition.adults is None
    assert composition.adult_count == 0


def test_button_options_from_model_are_ignored():
    response = validate_parsed_data(
        {
            "conversation_stage": "collecting_passengers",
            "assistant_message": "How many adults?",
            "button_options": [{"label": "1 adult", "value": "1"}],
        }
    )
    assert "button_options" not in response.to_wire()


def test_sanitize_response():
    raw = '```json\n{"a":\\n 1,\\t"b": 2}\n```\x07'
    assert sanitize_response(raw) == '{"a": 1, "b": 2}'
    assert sanitize_response("JSON: {}") == "{}"
    assert sanitize_response(None) == ""


def test_sanitize_response_keeps_escaped_backslashes():
    assert sanitize_response(r'{"path":"C:\\new folder"}') == r'{"path":"C:\\new folder"}'
    assert sanitize_response(r'{"a":"x\\\ny"}') == r'{"a":"x\\ y"}'
    assert json.loads(sanitize_response(r'{"path":"C:\\temp"}'))["path"] == "C:\\temp"


def test_sanitize_message_keeps_question_before_leaked_options():
    message = 'How many children will travel? [{"label":"No children","value":"0"},{"label":"1 child","value":"1"}]'
    assert sanitize_assistant_message(message) == "How many children will travel?"


def test_sanitize_message_keeps_full_question_verbatim():
    message = 'Perfect! Which month works best? {"label":"Jan","value":"jan"}'
    assert sanitize_assistant_message(message) == "Perfect! Which month works best?"


def test_sanitize_message_only_options_falls_back():
    assert sanitize_assistant_message('[{"label":"1 adult","value":"1"}]') == FALLBACK_ASSISTANT_MESSAGE


def test_sanitize_message_strips_fragments_without_question():
    cleaned = sanitize_assistant_message('Great choice. {"label":"Beach","value":"beach"}')
    assert cleaned == "Great choice."
    assert "label" not in cleaned


def test_sanitize_message_decodes_unicode_and_keeps_clean_text():
    assert sanitize_assistant_message("Qual \\u00e9 a sua origem?") == "Qual é a sua origem?"
    assert sanitize_assistant_message("Great choice! What is your budget?") == "Great choice! What is your budget?"
    assert sanitize_assistant_message("") == FALLBACK_ASSISTANT_MESSAGE


def test_generate_fallback_keeps_stage_and_data():
    data = CollectedTravelData(origin_name="Recife", origin_iata="REC")

    response = generate_fallback(ConversationStage.COLLECTING_BUDGET, data, "boom")

    assert response.conversation_stage == ConversationStage.COLLECTING_BUDGET
    assert response.data_collected == data
    assert response.next_question_key == NextQuestionKey.BUDGET
    assert response.assistant_message == PARSE_FALLBACK_MESSAGE
    assert response.is_final_recommendation is False
