# Role: Local developer CLI to interact with FlowController without the web API.
# Useful for manual testing of the interview and seeing debug logs in the terminal.

from __future__ import annotations

import getpass

import travelbot.config
travelbot.config.load_env()

from travelbot.core.errors import FlightSearchError, FlightSearchParamsInvalid, ModelInvocationError
from travelbot.core.flow_controller import FlowController
from travelbot.utils.flight_search_builder import get_flight_search_description


def _print_turn(result) -> None:
    print(f"\nAssistant: {result.assistant_message}")
    if result.button_options:
        print("Options: " + " | ".join(f"{o['label']} ({o['value']})" for o in result.button_options))
    print(f"[stage: {result.conversation_stage.value}]")


def main() -> None:
    # 1) Create FlowController
    # 2) Maintain a session_id across turns
    # 3) Route user input -> FlowController -> print assistant output
    print("Travel Interview CLI")
    print("Commands: /new (new session), /session (show session), /end (finish and show data),")
    print("          /flights (search flights for the recommendation), /exit")
    print("-" * 50)

    flow = FlowController()
    user_id = getpass.getuser()
    session_id = flow.start_session(user_id)
    print(f"session_id: {session_id}")

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/new", "new"}:
            session_id = flow.start_session(user_id)
            print(f"New session_id: {session_id}")
            continue

        if cmd in {"/session", "session"}:
            session = flow.get_session(session_id)
            print(f"session_id: {session_id}")
            print(f"stage: {session.current_stage.value}")
            print(f"data: {session.collected_data.to_wire()}")
            continue

        if cmd in {"/end", "end"}:
            data = flow.end_session(session_id)
            print(f"Collected data: {data.to_wire()}")
            session_id = flow.start_session(user_id)
            print(f"New session_id: {session_id}")
            continue

        if cmd in {"/flights", "flights"}:
            session = flow.get_session(session_id)
            print(get_flight_search_description(session.collected_data) or "Nothing collected yet.")
            for option in flow.get_travel_date_options(session_id):
                print(f"dates: {option.departure_iso} -> {option.return_iso}")
            try:
                offers = flow.search_flights(session_id)
            except (FlightSearchParamsInvalid, FlightSearchError) as e:
                print(f"Cannot search flights: {e}")
                continue
            print(f"{len(offers)} offer(s) found")
            for offer in offers[:5]:
                price = offer.get("price") or {}
                print(f"- {price.get('grandTotal') or price.get('total')} {price.get('currency', '')}")
            continue

        try:
            result = flow.process_message(session_id, user_message)
        except ModelInvocationError as e:
            print(f"\n[model error] {e}")
            continue
        _print_turn(result)


if __name__ == "__main__":
    main()
