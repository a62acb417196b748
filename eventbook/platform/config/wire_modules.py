"""
Wire Modules Configuration

Modules that use `Provide[...]` markers and need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from eventbook.service.booking.app.command import create_event_use_case, update_event_use_case
from eventbook.service.booking.app.query import get_event_use_case
from eventbook.service.booking.driving_adapter.http_controller import (
    booking_controller,
    event_controller,
)
from eventbook.service.booking.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_event_use_case,
    update_event_use_case,
    get_event_use_case,
    role_auth,
    booking_controller,
    event_controller,
]
