# Role: Turns raw model output into a validated ChatbotJsonResponse. The model is asked for one-line JSON but
# in practice wraps it in fences, adds prose, pretty-prints it as an escaped string, leaves trailing commas or
# leaks JSON into the human-readable message. Each repair is a small pure strategy tried in a fixed order.

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import travelbot.config as config
from travelbot.core.errors import ParseFailure, ValidationFailure
from travelbot.core.stage_calculator import determine_next_question
from travelbot.models.chat_response import ChatbotJsonResponse, ParsedResponse
from travelbot.models.stage import ConversationStage, NextQuestionKey
from travelbot.models.travel_data import DATA_FIELDS, LIST_FIELDS, CollectedTravelData

FALLBACK_ASSISTANT_MESSAGE = "How can I help you?"
EMERGENCY_ASSISTANT_MESSAGE = "Sorry, there was a communication problem. Could you rephrase your answer?"
PARSE_FALLBACK_MESSAGE = "Sorry, something went wrong on my side. Could you repeat your answer?"

_REQUIRED_FIELDS = ("conversation_stage", "data_collected", "assistant_message", "is_final_recommendation")
_STRING_FIELDS = ("origin_name", "origin_iata", "destination_name", "destination_iata", "purpose")
_IATA_FIELDS = ("origin_iata", "destination_iata")
_STAGE_VALUES = {stage.value for stage in ConversationStage}
_QUESTION_KEY_VALUES = {key.value for key in NextQuestionKey}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_ALL_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")


# ----------------------------
# Sanitization
# ----------------------------
def sanitize_response(response: str) -> str:
    # 1) Drop null bytes, code fences and "here's the JSON" prose wrappers
    # 2) Literal escape sequences (backslash + n/r/t) -> spaces (pretty-printed JSON sent as a string)
    # 3) Real line breaks -> spaces, strip remaining control characters
    text = (response or "").replace("\x00", "")
    text = re.sub(r"^\s*```json\s*", "", text, flags=re.IGNORECASE | re.MULTILINE)
    text = re.sub(r"^\s*```\s*", "", text, flags=re.MULTILINE)
    text = re.sub(r"```\s*$", "", text, flags=re.MULTILINE)
    text = re.sub(r"^\s*Here'?s?\s+(?:is\s+)?the\s+JSON\s*:?\s*", "", text, flags=re.IGNORECASE | re.MULTILINE)
    text = re.sub(r"^\s*JSON\s*:\s*", "", text, flags=re.IGNORECASE | re.MULTILINE)

    # Key line: pairs are consumed left to right, so an escaped backslash followed by n/r/t is kept.
    text = re.sub(r"\\(\\|[nrt])", lambda m: m.group(0) if m.group(1) == "\\" else " ", text)
    text = re.sub(r"\s+", " ", text)
    text = _CONTROL_CHARS.sub("", text)
    return text.strip()


def _looks_corrupted(message: str) -> bool:
    return bool(re.search(r"[{}\[\]]|[\"']?\b(?:label|value)\b[\"']?\s*:", message))


def _extract_trailing_question(message: str) -> Optional[str]:
    # Key line: a question must start with a capital letter and may not cross JSON punctuation or quotes.
    candidates = re.findall(r"[A-ZÀ-ÖØ-Þ][^?{}\[\]\"]*\?", message)
    for candidate in reversed(candidates):
        question = re.sub(r"^[\s}\]\[{,]+", "", candidate).strip()
        if len(question) > 10 and '"label"' not in question and '"value"' not in question:
            return question
    return None


def sanitize_assistant_message(message: str) -> str:
    # 1) Decode literal unicode escapes left as text by the model
    # 2) Corrupted message with a clean question -> keep just the question
    # 3) Otherwise strip button-option / JSON fragments and orphaned punctuation
    # 4) Too short after cleaning -> generic prompt
    if not isinstance(message, str) or not message.strip():
        return FALLBACK_ASSISTANT_MESSAGE

    sanitized = re.sub(r"\\u([0-9a-fA-F]{4})", lambda m: chr(int(m.group(1), 16)), message)

    if _looks_corrupted(sanitized):
        question = _extract_trailing_question(sanitized)
        if question:
            if config.DEBUG:
                print("SANITIZER: extracted question from corrupted message:", question)
            return question

    label = r"[\"']?label[\"']?\s*:\s*[\"'][^\"']*[\"']"
    value = r"[\"']?value[\"']?\s*:\s*[\"'][^\"']*[\"']"

    # Arrays and loose objects shaped like button options.
    sanitized = re.sub(r"\[\s*\{[^}]*" + label + r"[^}]*" + value + r"[^}]*\}[^\]]*\]", "", sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(r"\{[^}]*" + label + r"[^}]*" + value + r"[^}]*\}", "", sanitized, flags=re.IGNORECASE)
    # Partial fragments such as: "None","value":"0"},{"label":"1 child"
    sanitized = re.sub(r"[\"'][^\"']*[\"']\s*,\s*" + value + r"\s*\}", "", sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(r"\{\s*" + label, "", sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(r"[\"']?\b(?:label|value)\b[\"']?\s*:\s*[\"'][^\"']*[\"']", "", sanitized, flags=re.IGNORECASE)
    # Any other small JSON object.
    sanitized = re.sub(r"\{\s*\"[^\"]*\"\s*:[^{}]*\}", "", sanitized)

    sanitized = re.sub(r"\[\s*[,\s]*\]", "", sanitized)
    sanitized = re.sub(r"^[\s}\],]+", "", sanitized)
    sanitized = re.sub(r"[\s\[{,]+$", "", sanitized)
    sanitized = re.sub(r",\s*,", ",", sanitized)
    sanitized = re.sub(r"^\s*,\s*", "", sanitized)
    sanitized = re.sub(r"\s*,\s*$", "", sanitized)
    sanitized = re.sub(r"^\s*[\[\]{}]\s*", "", sanitized)
    sanitized = re.sub(r"\s*[\[\]{}]\s*$", "", sanitized)
    sanitized = re.sub(r"\s+", " ", sanitized).strip()

    if len(sanitized) < 5:
        if config.DEBUG:
            print("SANITIZER: message empty after cleanup, using fallback. Original:", message[:100])
        return FALLBACK_ASSISTANT_MESSAGE

    return sanitized


# ----------------------------
# Validation
# ----------------------------
def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _normalize_children(value: Any) -> Optional[List[Dict[str, Any]]]:
    if value is None:
        return None

    if _is_number(value):
        if value < 0:
            raise ValidationFailure("passenger_composition.children cannot be negative")
        if value == 0:
            return []
        # Key line: a bare count carries no ages; keep children "not collected" so the interview asks for ages.
        if config.DEBUG:
            print(f"PARSER: children given as count ({value}) without ages; waiting for ages")
        return None

    if not isinstance(value, list):
        raise ValidationFailure("passenger_composition.children must be a list, a number or null")

    children: List[Dict[str, Any]] = []
    for item in value:
        if _is_number(item):
            children.append({"age": int(item)})
            continue
        if not isinstance(item, dict) or not _is_number(item.get("age")):
            raise ValidationFailure("each child must be an object with a numeric age")
        child: Dict[str, Any] = {"age": int(item["age"])}
        is_paying = item.get("isPaying", item.get("is_paying"))
        if isinstance(is_paying, bool):
            child["isPaying"] = is_paying
        children.append(child)
    return children


def _normalize_passenger_composition(value: Any) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationFailure("passenger_composition must be an object or null")

    adults = value.get("adults")
    children = _normalize_children(value.get("children"))

    if adults is None:
        # Key line: a children-only update leaves adults "not provided"; the merge keeps the known count.
        return None if children is None else {"adults": None, "children": children}
    if not _is_number(adults) or adults != int(adults):
        raise ValidationFailure("passenger_composition.adults must be an integer")

    return {"adults": int(adults), "children": children}


def validate_collected_data(data: Any) -> Dict[str, Any]:
    # 1) Must be an object; missing sub-fields are filled with null
    # 2) Type checks (budget number|null, list fields list|null, strings string|null)
    # 3) Normalize IATA codes and passenger composition
    if not isinstance(data, dict):
        raise ValidationFailure("data_collected must be an object")

    out: Dict[str, Any] = {name: data.get(name) for name in DATA_FIELDS}

    budget = out["budget_in_brl"]
    if budget is not None and not _is_number(budget):
        raise ValidationFailure("budget_in_brl must be a number or null")

    for name in LIST_FIELDS:
        items = out[name]
        if items is None:
            continue
        if not isinstance(items, list):
            raise ValidationFailure(f"{name} must be an array or null")
        out[name] = [str(item).strip() for item in items if item is not None and str(item).strip()]

    for name in _STRING_FIELDS:
        text = out[name]
        if text is not None and not isinstance(text, str):
            raise ValidationFailure(f"{name} must be a string or null")
        if isinstance(text, str):
            out[name] = text.strip() or None

    for name in _IATA_FIELDS:
        if out[name]:
            out[name] = out[name].upper()

    out["passenger_composition"] = _normalize_passenger_composition(out["passenger_composition"])
    return out


def validate_parsed_data(data: Any) -> ChatbotJsonResponse:
    # 1) Object with the required top-level fields (defaults where the contract allows)
    # 2) Field types, stage enum, collected-data shape
    # 3) A final recommendation must name its destination
    # 4) Sanitize the user-facing message
    if not isinstance(data, dict):
        raise ValidationFailure("Response must be a JSON object")

    data = dict(data)
    for name in _REQUIRED_FIELDS:
        if name in data:
            continue
        if name == "data_collected":
            data["data_collected"] = {}
        elif name == "is_final_recommendation":
            data["is_final_recommendation"] = False
        else:
            raise ValidationFailure(f"Missing required field: {name}")

    if not isinstance(data["conversation_stage"], str):
        raise ValidationFailure("conversation_stage must be a string")
    if not isinstance(data["assistant_message"], str):
        raise ValidationFailure("assistant_message must be a string")
    if not isinstance(data["is_final_recommendation"], bool):
        raise ValidationFailure("is_final_recommendation must be a boolean")

    collected = validate_collected_data(data["data_collected"])

    if data["is_final_recommendation"] and not (collected["destination_name"] and collected["destination_iata"]):
        raise ValidationFailure("A final recommendation requires destination_name and destination_iata")

    if data["conversation_stage"] not in _STAGE_VALUES:
        raise ValidationFailure(f"Invalid conversation_stage: {data['conversation_stage']}")

    next_key = data.get("next_question_key")
    if next_key not in _QUESTION_KEY_VALUES:
        next_key = None

    # Key line: button options are generated server-side; anything the model sends is ignored.
    data.pop("button_options", None)

    try:
        return ChatbotJsonResponse.model_validate(
            {
                "conversation_stage": data["conversation_stage"],
                "data_collected": collected,
                "next_question_key": next_key,
                "assistant_message": sanitize_assistant_message(data["assistant_message"]),
                "is_final_recommendation": data["is_final_recommendation"],
            }
        )
    except ValueError as e:
        raise ValidationFailure(f"Response does not match the schema: {e}") from e


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseFailure(f"Invalid JSON: {e}") from e


# ----------------------------
# Strategies (text -> ChatbotJsonResponse, raise ResponseParseError on failure)
# ----------------------------
def direct_parse(text: str) -> ChatbotJsonResponse:
    return validate_parsed_data(_loads(text))


def clean_and_parse(text: str) -> ChatbotJsonResponse:
    cleaned = re.sub(r"```json\s*", "", text, flags=re.IGNORECASE)
    cleaned = re.sub(r"```\s*", "", cleaned)
    cleaned = re.sub(r"^\s*[\r\n]+", "", cleaned, flags=re.MULTILINE)
    return validate_parsed_data(_loads(cleaned.strip()))


def _json_candidates(text: str) -> List[str]:
    # Order: fenced blocks, widest {...} span, then every balanced object found by the JSON decoder.
    candidates: List[str] = []
    for pattern in (r"```json\s*(\{.*\})\s*```", r"```\s*(\{.*\})\s*```"):
        candidates.extend(re.findall(pattern, text, flags=re.IGNORECASE | re.DOTALL))

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    decoder = json.JSONDecoder()
    for match in re.finditer(r"\{", text):
        try:
            _, consumed = decoder.raw_decode(text[match.start() :])
        except json.JSONDecodeError:
            continue
        candidates.append(text[match.start() : match.start() + consumed])

    seen = set()
    unique = []
    for candidate in candidates:
        if candidate not in seen:
            seen.add(candidate)
            unique.append(candidate)
    return unique


def extract_json_from_text(text: str) -> ChatbotJsonResponse:
    last_error: Optional[Exception] = None
    for candidate in _json_candidates(text):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = e
            continue
        try:
            return validate_parsed_data(parsed)
        except ValidationFailure as e:
            last_error = e
            continue

    detail = f" (last error: {last_error})" if last_error else ""
    raise ParseFailure(f"No valid JSON object found in text{detail}")


_STRING_LITERAL = re.compile(r'"(?:[^"\\]|\\.)*"')


def _outside_strings(text: str, repair: Callable[[str], str]) -> str:
    # Apply a repair only to the JSON structure between string literals; message text is left alone.
    parts: List[str] = []
    last = 0
    for match in _STRING_LITERAL.finditer(text):
        parts.append(repair(text[last : match.start()]))
        parts.append(match.group(0))
        last = match.end()
    parts.append(repair(text[last:]))
    return "".join(parts)


def _repair_structure(segment: str) -> str:
    segment = re.sub(r",(\s*[}\]])", r"\1", segment)
    segment = re.sub(r"([{,]\s*)([A-Za-z_]\w*)(\s*:)", r'\1"\2"\3', segment)
    segment = re.sub(r"(:\s*)None\b", r"\1null", segment)
    segment = re.sub(r"(:\s*)True\b", r"\1true", segment)
    segment = re.sub(r"(:\s*)False\b", r"\1false", segment)
    return segment


def fix_common_issues(text: str) -> str:
    fixed = text.replace("“", '"').replace("”", '"').replace("‘", "'").replace("’", "'")
    # Single-quoted keys/values in JSON positions only (apostrophes inside strings survive).
    fixed = re.sub(r"([{\[,:]\s*)'([^'\\]*)'", r'\1"\2"', fixed)
    fixed = _outside_strings(fixed, _repair_structure)
    return _ALL_CONTROL_CHARS.sub("", fixed)


def fix_common_issues_and_parse(text: str) -> ChatbotJsonResponse:
    fixed = fix_common_issues(text)
    try:
        parsed = json.loads(fixed)
    except json.JSONDecodeError:
        start = fixed.find("{")
        end = fixed.rfind("}")
        if start == -1 or end <= start:
            raise ParseFailure("Repaired text is still not JSON")
        parsed = _loads(fixed[start : end + 1])
    return validate_parsed_data(parsed)


_EMERGENCY_MESSAGE_PATTERNS = (
    re.compile(r"assistant_message[\"']?\s*:\s*[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"[\"']([^\"']{20,}?)[\"']"),
    re.compile(r"([A-Z][^.!?]*[.!?])"),
)


def emergency_parse(text: str) -> ChatbotJsonResponse:
    # Give up on structure: keep a readable sentence if one exists, pin everything else to the start.
    if not text or not text.strip():
        raise ParseFailure("Empty model response")

    message = EMERGENCY_ASSISTANT_MESSAGE
    for pattern in _EMERGENCY_MESSAGE_PATTERNS:
        match = pattern.search(text)
        if match and len(match.group(1)) > 10:
            message = match.group(1).strip()
            break

    return ChatbotJsonResponse(
        conversation_stage=ConversationStage.COLLECTING_ORIGIN,
        data_collected=CollectedTravelData(),
        next_question_key=NextQuestionKey.ORIGIN,
        assistant_message=message,
        is_final_recommendation=False,
    )


Strategy = Callable[[str], ChatbotJsonResponse]

STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("direct_parse", direct_parse),
    ("clean_and_parse", clean_and_parse),
    ("extract_json_from_text", extract_json_from_text),
    ("fix_common_issues_and_parse", fix_common_issues_and_parse),
    ("emergency_parse", emergency_parse),
)


def generate_fallback(
    current_stage: ConversationStage,
    collected_data: CollectedTravelData,
    error_message: str,
) -> ChatbotJsonResponse:
    # Role: structured "please repeat" response that keeps stage and data exactly as they were.
    if config.DEBUG:
        print("PARSER FALLBACK:", error_message)

    return ChatbotJsonResponse(
        conversation_stage=current_stage,
        data_collected=collected_data,
        next_question_key=determine_next_question(collected_data),
        assistant_message=PARSE_FALLBACK_MESSAGE,
        is_final_recommendation=False,
    )


class ResponseParser:
    """
    Runs the strategy chain over sanitized model output.

    Contract:
    - parse() returns the first strategy result that validates, tagged with the strategy name.
    - The emergency strategy almost always succeeds; callers check ParsedResponse.is_emergency
      and treat it as a parse failure for state purposes.
    - ParseFailure is raised only when every strategy failed (e.g. empty output).
    """

    def __init__(self, strategies: Optional[Tuple[Tuple[str, Strategy], ...]] = None) -> None:
        self.strategies = strategies or STRATEGIES

    def parse(self, raw_response: str, session_id: Optional[str] = None) -> ParsedResponse:
        sanitized = sanitize_response(raw_response)

        if config.DEBUG:
            print("\n--- RESPONSE PARSER ---")
            print("SESSION:", session_id)
            print("RAW (preview):", (raw_response or "")[:200])
            print("SANITIZED (preview):", sanitized[:200])

        errors: List[str] = []
        for name, strategy in self.strategies:
            try:
                response = strategy(sanitized)
            except (ParseFailure, ValidationFailure) as e:
                errors.append(f"{name}: {e}")
                if config.DEBUG:
                    print(f"STRATEGY FAILED: {name} -> {e}")
                continue

            if config.DEBUG:
                print("STRATEGY OK:", name)
                print("-----------------------\n")
            return ParsedResponse(response=response, recovered_by=name)

        if config.DEBUG:
            print("ALL STRATEGIES FAILED:", errors)
            print("-----------------------\n")
        raise ParseFailure("All parsing strategies failed: " + "; ".join(errors), errors=errors)
