import hashlib
import hmac
from typing import Any, Dict, Optional, Self

from fastapi import Depends
import orjson

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.reservation.domain.reservation_error import HoldError
from src.service.ticketing.app.command.cancel_booking_use_case import (
    PAYMENT_FAILED_REASON,
    CancelBookingUseCase,
)
from src.service.ticketing.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.ticketing.domain.booking_error import InvalidBookingStateError
from src.service.ticketing.domain.entity.booking_entity import BookingStatus


PAYMENT_SUCCEEDED = 'payment.succeeded'
PAYMENT_FAILED = 'payment.failed'


def sign_payload(body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of the raw request body, as the gateway sends it."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class HandlePaymentWebhookUseCase:
    """
    Payment gateway callback.

    payment.succeeded -> confirm_payment, payment.failed -> cancel. The
    gateway retries until it gets a 2xx, so outcomes the gateway cannot act
    on (already cancelled, hold expired and refund due) are logged and
    acknowledged instead of failing the callback.
    """

    def __init__(
        self,
        *,
        confirm_payment_use_case: ConfirmPaymentUseCase,
        cancel_booking_use_case: CancelBookingUseCase,
        webhook_secret: Optional[str] = None,
    ) -> None:
        self.confirm_payment_use_case = confirm_payment_use_case
        self.cancel_booking_use_case = cancel_booking_use_case
        self.webhook_secret = (
            webhook_secret or settings.PAYMENT_WEBHOOK_SECRET.get_secret_value()
        )

    @classmethod
    def depends(
        cls,
        confirm_payment_use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
        cancel_booking_use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
    ) -> Self:
        return cls(
            confirm_payment_use_case=confirm_payment_use_case,
            cancel_booking_use_case=cancel_booking_use_case,
        )

    def verify_signature(self, *, body: bytes, signature: Optional[str]) -> None:
        if not signature:
            raise AuthenticationError('Missing payment signature')
        expected = sign_payload(body, self.webhook_secret)
        if not hmac.compare_digest(expected, signature.strip().lower()):
            raise AuthenticationError('Invalid payment signature')

    @staticmethod
    def parse_event(body: bytes) -> tuple[str, Dict[str, Any]]:
        try:
            payload = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise ValidationError('Webhook body is not valid JSON') from e
        if not isinstance(payload, dict) or not isinstance(payload.get('data'), dict):
            raise ValidationError('Webhook body must contain a data object')

        event_type = payload.get('type')
        if not isinstance(event_type, str):
            raise ValidationError('Webhook event type is required')
        return event_type, payload['data']

    @staticmethod
    def _log_refund(*, booking_id: str, payment_ref: str, cause: str) -> None:
        Logger.base.warning(
            f'💸 [WEBHOOK] booking={booking_id} paid but not confirmed '
            f'({cause}), refund required for payment_ref={payment_ref}'
        )

    @Logger.io
    async def handle(self, *, body: bytes, signature: Optional[str]) -> Dict[str, Any]:
        self.verify_signature(body=body, signature=signature)
        event_type, data = self.parse_event(body)

        if event_type not in (PAYMENT_SUCCEEDED, PAYMENT_FAILED):
            Logger.base.info(f'💳 [WEBHOOK] Ignoring event type {event_type}')
            return {'received': True}

        booking_id = data.get('booking_id')
        if not isinstance(booking_id, str) or not booking_id:
            raise ValidationError('Webhook data.booking_id is required')

        if event_type == PAYMENT_SUCCEEDED:
            payment_ref = data.get('payment_ref')
            if not isinstance(payment_ref, str) or not payment_ref:
                raise ValidationError('Webhook data.payment_ref is required')
            try:
                await self.confirm_payment_use_case.confirm_payment(
                    booking_id=booking_id, payment_ref=payment_ref
                )
            except HoldError as e:
                self._log_refund(booking_id=booking_id, payment_ref=payment_ref, cause=e.reason)
            except InvalidBookingStateError as e:
                # A concurrent confirm is still running; let the gateway retry
                if e.status == BookingStatus.PENDING:
                    raise
                self._log_refund(booking_id=booking_id, payment_ref=payment_ref, cause=e.message)
        else:
            try:
                await self.cancel_booking_use_case.cancel(
                    booking_id=booking_id, reason=PAYMENT_FAILED_REASON
                )
            except InvalidBookingStateError as e:
                Logger.base.info(f'💳 [WEBHOOK] booking={booking_id} not cancelled: {e.message}')

        return {'received': True}
