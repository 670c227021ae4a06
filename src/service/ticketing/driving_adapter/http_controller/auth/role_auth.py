from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from opentelemetry import trace

from src.platform.config.di import Container
from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


bearer_scheme = HTTPBearer(auto_error=False)


@inject
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> UserEntity:
    """Get current user from the bearer token (stateless, no DB query)"""
    return jwt_auth.get_current_user_info_from_jwt(credentials.credentials if credentials else None)


async def require_manager_or_admin(
    current_user: UserEntity = Depends(get_current_user),
) -> UserEntity:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_manager_or_admin',
        attributes={'user.id': current_user.id, 'user.role': current_user.role.value},
    ):
        current_user.ensure_role(UserRole.MANAGER, UserRole.ADMIN)
        return current_user
