"""
https://python-dependency-injector.ets-labs.org/index.html

STATE_BACKEND picks the ledger and repositories:
    memory  - single node, everything in process
    kvrocks - horizontally scaled, shared state in Kvrocks
"""

import operator

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.service.reservation.driven_adapter.state.in_memory_reservation_ledger_impl import (
    InMemoryReservationLedgerImpl,
)
from src.service.reservation.driven_adapter.state.kvrocks_reservation_ledger_impl import (
    KvrocksReservationLedgerImpl,
)
from src.service.shared_kernel.domain.clock import utc_now
from src.service.ticketing.app.command.expire_stale_holds_use_case import (
    BookingExpirer,
    ExpireStaleHoldsUseCase,
)
from src.service.ticketing.driven_adapter.notification.mock_email_booking_notifier_impl import (
    MockEmailBookingNotifierImpl,
)
from src.service.ticketing.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.booking_query_repo_impl import BookingQueryRepoImpl
from src.service.ticketing.driven_adapter.repo.in_memory_booking_repo_impl import (
    InMemoryBookingCommandRepoImpl,
    InMemoryBookingQueryRepoImpl,
    InMemoryBookingStore,
)
from src.service.ticketing.driven_adapter.repo.in_memory_show_repo_impl import InMemoryShowRepoImpl
from src.service.ticketing.driven_adapter.repo.show_command_repo_impl import ShowCommandRepoImpl
from src.service.ticketing.driven_adapter.repo.show_query_repo_impl import ShowQueryRepoImpl
from src.service.ticketing.driven_adapter.state.seat_availability_query_handler_impl import (
    SeatAvailabilityQueryHandlerImpl,
)
from src.service.ticketing.driving_adapter.background.expiry_sweeper import ExpirySweeper
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Wall clock (overridden with a fake clock in tests)
    clock = providers.Object(utc_now)

    # Reservation ledger (authoritative seat state)
    reservation_ledger = providers.Selector(
        config_service.provided.STATE_BACKEND,
        memory=providers.Singleton(InMemoryReservationLedgerImpl, clock=clock),
        kvrocks=providers.Singleton(
            KvrocksReservationLedgerImpl,
            clock=clock,
            sweep_batch_size=config_service.provided.SWEEP_BATCH_SIZE,
        ),
    )

    # Repositories
    in_memory_booking_store = providers.Singleton(InMemoryBookingStore)
    in_memory_show_repo = providers.Singleton(InMemoryShowRepoImpl)

    booking_command_repo = providers.Selector(
        config_service.provided.STATE_BACKEND,
        memory=providers.Singleton(InMemoryBookingCommandRepoImpl, store=in_memory_booking_store),
        kvrocks=providers.Singleton(BookingCommandRepoImpl),
    )
    booking_query_repo = providers.Selector(
        config_service.provided.STATE_BACKEND,
        memory=providers.Singleton(InMemoryBookingQueryRepoImpl, store=in_memory_booking_store),
        kvrocks=providers.Singleton(BookingQueryRepoImpl),
    )
    show_command_repo = providers.Selector(
        config_service.provided.STATE_BACKEND,
        memory=in_memory_show_repo,
        kvrocks=providers.Singleton(ShowCommandRepoImpl),
    )
    show_query_repo = providers.Selector(
        config_service.provided.STATE_BACKEND,
        memory=in_memory_show_repo,
        kvrocks=providers.Singleton(ShowQueryRepoImpl),
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)

    # Notifications (mock email, best effort)
    booking_notifier = providers.Singleton(MockEmailBookingNotifierImpl, clock=clock)

    # Seat availability snapshots (Singleton for cache)
    seat_availability_query_handler = providers.Singleton(
        SeatAvailabilityQueryHandlerImpl,
        ledger=reservation_ledger,
        ttl_seconds=config_service.provided.AVAILABILITY_CACHE_TTL_SECONDS,
        clock=clock,
    )

    # Expiry (shared by confirm and the sweeper)
    booking_expirer = providers.Singleton(
        BookingExpirer,
        ledger=reservation_ledger,
        booking_command_repo=booking_command_repo,
        seat_availability_handler=seat_availability_query_handler,
        notifier=booking_notifier,
    )
    expire_stale_holds_use_case = providers.Singleton(
        ExpireStaleHoldsUseCase,
        ledger=reservation_ledger,
        booking_query_repo=booking_query_repo,
        expirer=booking_expirer,
        settings=config_service,
        clock=clock,
    )

    # Background sweeper; replicas share Kvrocks, so they coordinate through a lock
    expiry_sweeper = providers.Singleton(
        ExpirySweeper,
        use_case=expire_stale_holds_use_case,
        interval_seconds=config_service.provided.SWEEP_INTERVAL_SECONDS,
        use_distributed_lock=providers.Callable(
            operator.eq, config_service.provided.STATE_BACKEND, 'kvrocks'
        ),
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
