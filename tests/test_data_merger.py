from travelbot.core.data_merger import is_present, merge
from travelbot.models.travel_data import CollectedTravelData


def test_presence_rules():
    assert not is_present(None)
    assert not is_present("   ")
    assert not is_present([])
    assert is_present(0)
    assert is_present(["Beach"])


def test_missing_values_never_erase_known_ones():
    previous = CollectedTravelData(origin_name="São Paulo", origin_iata="GRU", activities=["Beach"])
    incoming = CollectedTravelData(origin_name=" ", activities=[], budget_in_brl=5000)

    merged = merge(previous, incoming)

    assert merged.origin_name == "São Paulo"
    assert merged.origin_iata == "GRU"
    assert merged.activities == ["Beach"]
    assert merged.budget_in_brl == 5000


def test_present_values_override():
    previous = CollectedTravelData(budget_in_brl=3000, availability_months=["May"])
    merged = merge(previous, CollectedTravelData(budget_in_brl=4500, availability_months=["June", "July"]))
    assert merged.budget_in_brl == 4500
    assert merged.availability_months == ["June", "July"]


def test_merge_is_idempotent_and_pure():
    previous = CollectedTravelData(origin_name="Recife", activities=["Culture"])
    incoming = CollectedTravelData(origin_iata="REC", activities=["Beach"])

    once = merge(previous, incoming)
    twice = merge(once, incoming)

    assert once == twice
    assert previous.activities == ["Culture"]
    once.activities.append("Food")
    assert incoming.activities == ["Beach"]


def test_children_survive_a_composition_without_children():
    previous = CollectedTravelData.model_validate(
        {"passenger_composition": {"adults": 2, "children": [{"age": 7}]}}
    )
    incoming = CollectedTravelData.model_validate({"passenger_composition": {"adults": 3, "children": None}})

    merged = merge(previous, incoming)

    assert merged.passenger_composition.adults == 3
    assert [c.age for c in merged.passenger_composition.children] == [7]


def test_no_children_answer_replaces_children():
    previous = CollectedTravelData.model_validate(
        {"passenger_composition": {"adults": 2, "children": [{"age": 7}]}}
    )
    incoming = CollectedTravelData.model_validate({"passenger_composition": {"adults": 2, "children": []}})
    assert merge(previous, incoming).passenger_composition.children == []


def test_adults_survive_a_children_only_update():
    previous = CollectedTravelData.model_validate({"passenger_composition": {"adults": 2}})
    incoming = CollectedTravelData.model_validate({"passenger_composition": {"children": [{"age": 4}]}})

    merged = merge(previous, incoming)

    assert merged.passenger_composition.adults == 2
    assert [c.age for c in merged.passenger_composition.children] == [4]
