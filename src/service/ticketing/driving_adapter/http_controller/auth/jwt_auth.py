"""
Bearer token verification.

Tokens are issued by the account service; this service only verifies them
and rebuilds the caller from the claims (no user lookup).
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from fastapi import HTTPException, status
import jwt

from src.platform.config.core_setting import settings
from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_jwt_token(
        self, user_entity: UserEntity, *, expires_in: Optional[timedelta] = None
    ) -> str:
        """Issue a token. Only tooling and tests call this."""
        now = datetime.now(timezone.utc)
        payload = {
            'sub': user_entity.id,
            'role': user_entity.role.value,
            'email': user_entity.email,
            'iat': now,
            'exp': now + (expires_in or timedelta(minutes=self.token_expire_minutes)),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail='Token expired',
                headers={'WWW-Authenticate': 'Bearer'},
            )
        except jwt.PyJWTError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail='Invalid token',
                headers={'WWW-Authenticate': 'Bearer'},
            )

    def get_current_user_info_from_jwt(self, token: Optional[str]) -> UserEntity:
        if not token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail='Not authenticated',
                headers={'WWW-Authenticate': 'Bearer'},
            )

        payload = self.decode_jwt_token(token)
        user_id = payload.get('sub')
        role = payload.get('role', UserRole.CUSTOMER.value)
        if not user_id or role not in {r.value for r in UserRole}:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid token')

        # Rebuild UserEntity from JWT payload (no DB query)
        return UserEntity(id=str(user_id), role=UserRole(role), email=payload.get('email') or '')
