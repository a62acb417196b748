from fastapi import APIRouter, Depends, status

from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.app.command.create_event_use_case import CreateEventUseCase
from eventbook.service.booking.app.command.update_event_use_case import UpdateEventUseCase
from eventbook.service.booking.app.query.get_event_use_case import GetEventUseCase
from eventbook.service.booking.domain.entity.user_entity import UserEntity
from eventbook.service.booking.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_admin,
)
from eventbook.service.booking.driving_adapter.http_controller.schema.event_schema import (
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
)


router = APIRouter()


@router.post('', response_model=EventResponse, status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    current_user: UserEntity = Depends(require_admin),
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> EventResponse:
    event = await use_case.create_event(
        title=request.title,
        total_seats=request.total_seats,
        price=request.price,
        date=request.date,
        location=request.location,
    )
    return EventResponse.from_entity(event)


@router.get('/{event_id}', response_model=EventResponse)
@Logger.io
async def get_event(
    event_id: int,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> EventResponse:
    event = await use_case.get_event(event_id=event_id)
    return EventResponse.from_entity(event)


@router.patch('/{event_id}', response_model=EventResponse)
@Logger.io
async def update_event(
    event_id: int,
    request: EventUpdateRequest,
    current_user: UserEntity = Depends(require_admin),
    use_case: UpdateEventUseCase = Depends(UpdateEventUseCase.depends),
) -> EventResponse:
    changes = request.model_dump(exclude_unset=True)
    event = await use_case.update_event(event_id=event_id, **changes)
    return EventResponse.from_entity(event)
