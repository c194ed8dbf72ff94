"""
Events Example

This example demonstrates typed events without an HTTP server:
1. Declare an event with a payload type
2. Emit it from an action handler
3. Subscribe to it on the registry's event bus

Run: python -m examples.02-events.main
"""

import asyncio
import logging
from dataclasses import dataclass

from pydantic import BaseModel

from endor import (
    ActionRequest,
    EndorService,
    EventDefinition,
    ResponseBuilder,
    ServiceRegistry,
    new_action_with_events,
)
from endor.config import EndorSettings
from endor.events import Event

# =============================================================================
# Payloads
# =============================================================================


class Greet(BaseModel):
    name: str


@dataclass
class Greeted:
    name: str


GREETED = EventDefinition.of(Greeted, "greeting.sent", "A greeting was sent")


async def greet(ctx):
    await ctx.emit_event("greeting.sent", Greeted(name=ctx.payload.name))
    return ResponseBuilder().add_data(f"Hello, {ctx.payload.name}!").build()


async def on_greeted(event: Event) -> None:
    print(f"  -> event {event.name} from {event.source}: {event.payload}")


# =============================================================================
# Main
# =============================================================================


async def main():
    logging.basicConfig(level=logging.INFO)

    registry = ServiceRegistry(EndorSettings(microservice_id="greeter", log_type="TEXT"))
    registry.register(
        EndorService(
            "greetings",
            "Greetings",
            methods={"send": new_action_with_events(greet, "Send a greeting", GREETED, payload_type=Greet)},
        )
    )
    registry.event_bus.subscribe("greeting.sent", on_greeted)
    registry.freeze()

    for name in ["Ada", "Grace"]:
        result = await registry.dispatch(
            ActionRequest(resource="greetings", action="send", app="demo", body={"name": name})
        )
        print(f"{result.status_code}: {result.to_dict()['data']}")

    await registry.close()


if __name__ == "__main__":
    asyncio.run(main())
