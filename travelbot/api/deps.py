# Role: Process-wide FlowController shared by the routers. Built once at import (after main.py loads .env);
# tests swap it by monkeypatching the router modules' flow_controller attribute.

from travelbot.core.flow_controller import FlowController

flow_controller = FlowController()
