# ruff: noqa: E402
"""
Test Configuration and Fixtures

- Environment is forced to the in-process backend before any ``src`` import
- FakeClock drives every expiry decision, so no test sleeps for a hold TTL
- Use cases are built directly from in-memory adapters (no DI needed)
- API tests go through the DI container with the same adapters overridden

Kvrocks integration tests create their own client and skip when none is
reachable.
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the log sinks are built at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    os.environ['KVROCKS_KEY_PREFIX'] = 'test_' if worker_id == 'master' else f'test_{worker_id}_'
    os.environ['STATE_BACKEND'] = 'memory'
    os.environ['SWEEPER_ENABLED'] = 'false'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


_early_setup_test_environment()

from collections.abc import Callable, Generator
from typing import Any

from dependency_injector import providers
from fastapi.testclient import TestClient
import pytest

from src.platform.config.core_setting import Settings, settings
from src.platform.config.di import container
from src.service.reservation.driven_adapter.state.in_memory_reservation_ledger_impl import (
    InMemoryReservationLedgerImpl,
)
from src.service.ticketing.app.command.cancel_booking_use_case import (
    CancelBookingUseCase,
)
from src.service.ticketing.app.command.confirm_payment_use_case import (
    ConfirmPaymentUseCase,
)
from src.service.ticketing.app.command.create_hold_use_case import CreateHoldUseCase
from src.service.ticketing.app.command.expire_stale_holds_use_case import (
    BookingExpirer,
    ExpireStaleHoldsUseCase,
)
from src.service.ticketing.app.command.register_show_use_case import (
    RegisterShowUseCase,
)
from src.service.ticketing.domain.entity.show_entity import Show
from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticketing.driven_adapter.notification.mock_email_booking_notifier_impl import (
    MockEmailBookingNotifierImpl,
)
from src.service.ticketing.driven_adapter.repo.in_memory_booking_repo_impl import (
    InMemoryBookingCommandRepoImpl,
    InMemoryBookingQueryRepoImpl,
    InMemoryBookingStore,
)
from src.service.ticketing.driven_adapter.repo.in_memory_show_repo_impl import (
    InMemoryShowRepoImpl,
)
from src.service.ticketing.driven_adapter.state.seat_availability_query_handler_impl import (
    SeatAvailabilityQueryHandlerImpl,
)
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from test.helpers import (
    PREMIUM_PRICE,
    REGULAR_PRICE,
    SHOW_STARTS_AT,
    FakeClock,
    default_tiers,
)


# =============================================================================
# Core collaborators (in-process backend)
# =============================================================================
@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return settings.model_copy(
        update={
            'HOLD_TTL_SECONDS': 300,
            'MAX_SEATS_PER_BOOKING': 6,
            'SWEEP_BATCH_SIZE': 100,
            'INR_TO_USD_RATE': 0.012,
        }
    )


@pytest.fixture
def ledger(fake_clock: FakeClock) -> InMemoryReservationLedgerImpl:
    return InMemoryReservationLedgerImpl(clock=fake_clock)


@pytest.fixture
def booking_store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def booking_command_repo(booking_store: InMemoryBookingStore) -> InMemoryBookingCommandRepoImpl:
    return InMemoryBookingCommandRepoImpl(store=booking_store)


@pytest.fixture
def booking_query_repo(booking_store: InMemoryBookingStore) -> InMemoryBookingQueryRepoImpl:
    return InMemoryBookingQueryRepoImpl(store=booking_store)


@pytest.fixture
def show_repo() -> InMemoryShowRepoImpl:
    return InMemoryShowRepoImpl()


@pytest.fixture
def notifier(fake_clock: FakeClock) -> MockEmailBookingNotifierImpl:
    return MockEmailBookingNotifierImpl(clock=fake_clock)


@pytest.fixture
def availability_handler(
    ledger: InMemoryReservationLedgerImpl, fake_clock: FakeClock
) -> SeatAvailabilityQueryHandlerImpl:
    return SeatAvailabilityQueryHandlerImpl(ledger=ledger, ttl_seconds=5, clock=fake_clock)


@pytest.fixture
def expirer(
    ledger: InMemoryReservationLedgerImpl,
    booking_command_repo: InMemoryBookingCommandRepoImpl,
    availability_handler: SeatAvailabilityQueryHandlerImpl,
    notifier: MockEmailBookingNotifierImpl,
) -> BookingExpirer:
    return BookingExpirer(
        ledger=ledger,
        booking_command_repo=booking_command_repo,
        seat_availability_handler=availability_handler,
        notifier=notifier,
    )


# =============================================================================
# Use cases
# =============================================================================
@pytest.fixture
def register_show_use_case(
    show_repo: InMemoryShowRepoImpl,
    ledger: InMemoryReservationLedgerImpl,
    fake_clock: FakeClock,
) -> RegisterShowUseCase:
    return RegisterShowUseCase(show_command_repo=show_repo, ledger=ledger, clock=fake_clock)


@pytest.fixture
def create_hold_use_case(
    ledger: InMemoryReservationLedgerImpl,
    show_repo: InMemoryShowRepoImpl,
    booking_command_repo: InMemoryBookingCommandRepoImpl,
    availability_handler: SeatAvailabilityQueryHandlerImpl,
    test_settings: Settings,
    fake_clock: FakeClock,
) -> CreateHoldUseCase:
    return CreateHoldUseCase(
        ledger=ledger,
        show_query_repo=show_repo,
        booking_command_repo=booking_command_repo,
        seat_availability_handler=availability_handler,
        settings=test_settings,
        clock=fake_clock,
    )


@pytest.fixture
def confirm_payment_use_case(
    ledger: InMemoryReservationLedgerImpl,
    booking_command_repo: InMemoryBookingCommandRepoImpl,
    booking_query_repo: InMemoryBookingQueryRepoImpl,
    availability_handler: SeatAvailabilityQueryHandlerImpl,
    notifier: MockEmailBookingNotifierImpl,
    expirer: BookingExpirer,
    fake_clock: FakeClock,
) -> ConfirmPaymentUseCase:
    return ConfirmPaymentUseCase(
        ledger=ledger,
        booking_command_repo=booking_command_repo,
        booking_query_repo=booking_query_repo,
        seat_availability_handler=availability_handler,
        notifier=notifier,
        expirer=expirer,
        clock=fake_clock,
    )


@pytest.fixture
def cancel_booking_use_case(
    ledger: InMemoryReservationLedgerImpl,
    booking_command_repo: InMemoryBookingCommandRepoImpl,
    booking_query_repo: InMemoryBookingQueryRepoImpl,
    availability_handler: SeatAvailabilityQueryHandlerImpl,
    fake_clock: FakeClock,
) -> CancelBookingUseCase:
    return CancelBookingUseCase(
        ledger=ledger,
        booking_command_repo=booking_command_repo,
        booking_query_repo=booking_query_repo,
        seat_availability_handler=availability_handler,
        clock=fake_clock,
    )


@pytest.fixture
def expire_stale_holds_use_case(
    ledger: InMemoryReservationLedgerImpl,
    booking_query_repo: InMemoryBookingQueryRepoImpl,
    expirer: BookingExpirer,
    test_settings: Settings,
    fake_clock: FakeClock,
) -> ExpireStaleHoldsUseCase:
    return ExpireStaleHoldsUseCase(
        ledger=ledger,
        booking_query_repo=booking_query_repo,
        expirer=expirer,
        settings=test_settings,
        clock=fake_clock,
    )


@pytest.fixture
async def show(register_show_use_case: RegisterShowUseCase) -> Show:
    """Active show registered with default_tiers()"""
    return await register_show_use_case.register_show(
        movie_id='tt0111161',
        theatre_id='pvr-forum',
        screen_id='screen-2',
        starts_at=SHOW_STARTS_AT,
        tiers=default_tiers(),
        show_id='show-1',
    )


# =============================================================================
# API (TestClient through the DI container)
# =============================================================================
@pytest.fixture
def api_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(api_clock: FakeClock) -> Generator[TestClient, None, None]:
    container.reset_singletons()
    container.clock.override(providers.Object(api_clock))

    from test.test_main import app

    with TestClient(app) as test_client:
        yield test_client

    container.clock.reset_override()
    container.reset_singletons()


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    jwt_auth = JwtAuth()

    def _make(user_id: str = 'user-x', role: UserRole = UserRole.CUSTOMER) -> dict[str, str]:
        user = UserEntity(id=user_id, role=role, email=f'{user_id}@x.io')
        return {'Authorization': f'Bearer {jwt_auth.create_jwt_token(user)}'}

    return _make


@pytest.fixture
def show_payload() -> dict[str, Any]:
    return {
        'show_id': 'show-api',
        'movie_id': 'tt0111161',
        'theatre_id': 'pvr-forum',
        'screen_id': 'screen-2',
        'starts_at': SHOW_STARTS_AT.isoformat(),
        'tiers': [
            {'tier_name': 'Premium', 'price': PREMIUM_PRICE, 'rows': ['a'], 'seats_per_row': 3},
            {
                'tier_name': 'Regular',
                'price': REGULAR_PRICE,
                'rows': ['B', 'C'],
                'seats_per_row': 3,
            },
        ],
    }
