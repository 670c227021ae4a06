from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Request, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.types import UtilsUUID7
from src.service.ticketing.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.ticketing.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.ticketing.app.command.create_hold_use_case import CreateHoldUseCase
from src.service.ticketing.app.command.handle_payment_webhook_use_case import (
    HandlePaymentWebhookUseCase,
)
from src.service.ticketing.app.query.get_booking_use_case import GetBookingUseCase
from src.service.ticketing.app.query.list_bookings_use_case import ListBookingsUseCase
from src.service.ticketing.domain.entity.booking_entity import BookingStatus
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import get_current_user
from src.service.ticketing.driving_adapter.http_controller.schema.booking_schema import (
    BookingResponse,
    CancelBookingRequest,
    ConfirmPaymentRequest,
    HoldRequest,
    WebhookAckResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/hold', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_hold(
    request: HoldRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CreateHoldUseCase = Depends(CreateHoldUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.create_hold') as span:
        span.set_attribute('show_id', request.show_id)
        span.set_attribute('user_id', current_user.id)

        booking = await use_case.create_hold(
            show_id=request.show_id, user_id=current_user.id, seat_codes=request.seat_codes
        )
        return BookingResponse.from_entity(booking)


@router.post('/confirm', status_code=status.HTTP_200_OK)
@Logger.io
async def confirm_payment(
    request: ConfirmPaymentRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.confirm_payment') as span:
        span.set_attribute('booking_id', str(request.booking_id))

        booking = await use_case.confirm_payment(
            booking_id=str(request.booking_id),
            payment_ref=request.payment_ref,
            user_id=current_user.id,
        )
        return BookingResponse.from_entity(booking)


@router.post('/cancel', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_booking(
    request: CancelBookingRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> BookingResponse:
    booking = await use_case.cancel(
        booking_id=str(request.booking_id), reason=request.reason, user_id=current_user.id
    )
    return BookingResponse.from_entity(booking)


@router.get('/my_booking', response_model=List[BookingResponse])
@Logger.io
async def list_my_bookings(
    booking_status: Optional[BookingStatus] = None,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListBookingsUseCase = Depends(ListBookingsUseCase.depends),
) -> List[BookingResponse]:
    bookings = await use_case.list_user_bookings(user_id=current_user.id, status=booking_status)
    return [BookingResponse.from_entity(booking) for booking in bookings]


@router.post('/payment/webhook', status_code=status.HTTP_200_OK)
@Logger.io
async def payment_webhook(
    request: Request,
    x_payment_signature: Optional[str] = Header(default=None, alias='X-Payment-Signature'),
    use_case: HandlePaymentWebhookUseCase = Depends(HandlePaymentWebhookUseCase.depends),
) -> WebhookAckResponse:
    """Payment gateway callback; authenticated by HMAC signature, not by user token."""
    body = await request.body()
    result = await use_case.handle(body=body, signature=x_payment_signature)
    return WebhookAckResponse(**result)


@router.get('/{booking_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_booking(
    booking_id: UtilsUUID7,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetBookingUseCase = Depends(GetBookingUseCase.depends),
) -> BookingResponse:
    booking = await use_case.get_booking(booking_id=str(booking_id), current_user=current_user)
    return BookingResponse.from_entity(booking)
