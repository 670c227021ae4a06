from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.register_show_use_case import RegisterShowUseCase
from src.service.ticketing.app.query.get_seat_availability_use_case import (
    GetSeatAvailabilityUseCase,
)
from src.service.ticketing.app.query.get_show_layout_use_case import GetShowLayoutUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    require_manager_or_admin,
)
from src.service.ticketing.driving_adapter.http_controller.schema.show_schema import (
    AvailabilityResponse,
    ShowCreateRequest,
    ShowLayoutResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def register_show(
    request: ShowCreateRequest,
    current_user: UserEntity = Depends(require_manager_or_admin),
    use_case: RegisterShowUseCase = Depends(RegisterShowUseCase.depends),
) -> ShowLayoutResponse:
    with tracer.start_as_current_span('controller.register_show') as span:
        span.set_attribute('user_id', current_user.id)
        span.set_attribute('screen_id', request.screen_id)

        show = await use_case.register_show(
            movie_id=request.movie_id,
            theatre_id=request.theatre_id,
            screen_id=request.screen_id,
            starts_at=request.starts_at,
            tiers=[tier.to_domain() for tier in request.tiers],
            is_active=request.is_active,
            show_id=request.show_id,
        )
        return ShowLayoutResponse.from_entity(show)


@router.get('/{show_id}/layout', status_code=status.HTTP_200_OK)
@Logger.io
async def get_show_layout(
    show_id: str,
    use_case: GetShowLayoutUseCase = Depends(GetShowLayoutUseCase.depends),
) -> ShowLayoutResponse:
    show = await use_case.get_show(show_id=show_id)
    return ShowLayoutResponse.from_entity(show)


@router.get('/{show_id}/availability', status_code=status.HTTP_200_OK)
@Logger.io
async def get_seat_availability(
    show_id: str,
    use_case: GetSeatAvailabilityUseCase = Depends(GetSeatAvailabilityUseCase.depends),
) -> AvailabilityResponse:
    snapshot = await use_case.get_availability(show_id=show_id)
    return AvailabilityResponse.from_snapshot(snapshot)
