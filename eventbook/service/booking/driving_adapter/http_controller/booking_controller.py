from typing import List
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from eventbook.platform.config.di import Container
from eventbook.platform.logging.loguru_io import Logger
from eventbook.service.booking.app.booking_ledger import BookingLedger
from eventbook.service.booking.domain.entity.user_entity import UserEntity
from eventbook.service.booking.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_admin,
)
from eventbook.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    ActiveBookingResponse,
    BookingCreateRequest,
    BookingResponse,
    BookingStatsResponse,
    BookingWithEventResponse,
    CancelBookingResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
@Logger.io
@inject
async def create_booking(
    request: BookingCreateRequest,
    current_user: UserEntity = Depends(get_current_user),
    ledger: BookingLedger = Depends(Provide[Container.booking_ledger]),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.create_booking') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('user_id', current_user.id)
        span.set_attribute('tickets', request.tickets)

        result = await ledger.create_booking(
            user_id=current_user.id,
            event_id=request.event_id,
            tickets=request.tickets,
            idempotency_key=request.idempotency_key,
            payment_reference=request.payment_reference,
        )
        return BookingResponse.from_entity(result.unwrap())


@router.get('', response_model=List[BookingWithEventResponse])
@Logger.io
@inject
async def list_all_bookings(
    current_user: UserEntity = Depends(require_admin),
    ledger: BookingLedger = Depends(Provide[Container.booking_ledger]),
) -> List[BookingWithEventResponse]:
    result = await ledger.list_all_bookings(requester_role=current_user.role)
    return [BookingWithEventResponse.from_view(view) for view in result.unwrap()]


@router.get('/my_booking', response_model=List[BookingWithEventResponse])
@Logger.io
@inject
async def list_my_bookings(
    current_user: UserEntity = Depends(get_current_user),
    ledger: BookingLedger = Depends(Provide[Container.booking_ledger]),
) -> List[BookingWithEventResponse]:
    """Bookings of the caller, newest first, each with its event summary."""
    result = await ledger.list_bookings_for_user(user_id=current_user.id)
    return [BookingWithEventResponse.from_view(view) for view in result.unwrap()]


@router.get('/stats', response_model=BookingStatsResponse)
@Logger.io
@inject
async def get_booking_stats(
    current_user: UserEntity = Depends(require_admin),
    ledger: BookingLedger = Depends(Provide[Container.booking_ledger]),
) -> BookingStatsResponse:
    result = await ledger.get_booking_stats(requester_role=current_user.role)
    return BookingStatsResponse.from_stats(result.unwrap())


@router.get('/event/{event_id}', response_model=List[BookingResponse])
@Logger.io
@inject
async def list_event_bookings(
    event_id: int,
    current_user: UserEntity = Depends(get_current_user),
    ledger: BookingLedger = Depends(Provide[Container.booking_ledger]),
) -> List[BookingResponse]:
    # Admin only, enforced by the ledger
    result = await ledger.list_bookings_for_event(
        requester_role=current_user.role, event_id=event_id
    )
    return [BookingResponse.from_entity(booking) for booking in result.unwrap()]


@router.get('/event/{event_id}/active', response_model=ActiveBookingResponse)
@Logger.io
@inject
async def has_active_booking(
    event_id: int,
    current_user: UserEntity = Depends(get_current_user),
    ledger: BookingLedger = Depends(Provide[Container.booking_ledger]),
) -> ActiveBookingResponse:
    result = await ledger.has_active_booking(user_id=current_user.id, event_id=event_id)
    return ActiveBookingResponse(event_id=event_id, has_active_booking=result.unwrap())


@router.get('/{booking_id}', response_model=BookingWithEventResponse)
@Logger.io
@inject
async def get_booking(
    booking_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    ledger: BookingLedger = Depends(Provide[Container.booking_ledger]),
) -> BookingWithEventResponse:
    result = await ledger.get_booking(
        requester_id=current_user.id, requester_role=current_user.role, booking_id=booking_id
    )
    return BookingWithEventResponse.from_view(result.unwrap())


@router.patch('/{booking_id}', response_model=CancelBookingResponse)
@Logger.io
@inject
async def cancel_booking(
    booking_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    ledger: BookingLedger = Depends(Provide[Container.booking_ledger]),
) -> CancelBookingResponse:
    with tracer.start_as_current_span('controller.cancel_booking') as span:
        span.set_attribute('booking_id', str(booking_id))
        span.set_attribute('user_id', current_user.id)

        result = await ledger.cancel_booking(
            requester_id=current_user.id,
            requester_role=current_user.role,
            booking_id=booking_id,
        )
        booking = result.unwrap()
        return CancelBookingResponse(status=booking.status.value, released_tickets=booking.tickets)
