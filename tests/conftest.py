import json

import pytest

from travelbot.core.flow_controller import FlowController
from travelbot.core.state_manager import InMemorySessionStore

EMPTY_DATA = {
    "origin_name": None,
    "origin_iata": None,
    "destination_name": None,
    "destination_iata": None,
    "activities": None,
    "budget_in_brl": None,
    "passenger_composition": None,
    "availability_months": None,
    "purpose": None,
    "hobbies": None,
}


def build_reply(stage, message, is_final=False, next_key=None, **data):
    collected = dict(EMPTY_DATA)
    collected.update(data)
    return json.dumps(
        {
            "conversation_stage": stage,
            "data_collected": collected,
            "next_question_key": next_key,
            "assistant_message": message,
            "is_final_recommendation": is_final,
        },
        ensure_ascii=False,
    )


class FakeModelClient:
    """Replays scripted model outputs, streamed in small chunks."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    def stream_text(self, system_prompt, messages):
        self.calls.append({"system_prompt": system_prompt, "messages": list(messages)})
        reply = self.replies.pop(0)
        for i in range(0, len(reply), 40):
            yield reply[i : i + 40]


class FakeFlightClient:
    def __init__(self, offers=None):
        self.offers = offers or []
        self.searches = []

    def search_flight_offers(self, params, currency_code="BRL"):
        self.searches.append(params)
        return self.offers


@pytest.fixture
def reply():
    return build_reply


@pytest.fixture
def empty_data():
    return dict(EMPTY_DATA)


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def fake_flights():
    return FakeFlightClient(offers=[{"id": "1", "price": {"grandTotal": "1234.56", "currency": "BRL"}}])


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def flow(store, fake_client, fake_flights):
    return FlowController(
        session_store=store,
        client=fake_client,
        flight_client=fake_flights,
        min_budget_per_passenger=500.0,
    )
