from pathlib import Path
from typing import Annotated, List, Literal, Self

import orjson
from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Cinema Seat Booking'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security (tokens are issued by the auth service, we only verify them)
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Payment gateway callback signature
    PAYMENT_WEBHOOK_SECRET: SecretStr = SecretStr('test_webhook_secret_change_in_production')

    # CORS
    # Raw env string reaches the validator: comma separated or a JSON list
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith('['):
            return orjson.loads(v)
        if isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # State backend: 'memory' for a single node, 'kvrocks' when horizontally scaled
    STATE_BACKEND: Literal['memory', 'kvrocks'] = 'kvrocks'

    # Kvrocks Configuration (Redis protocol + Kvrocks storage)
    KVROCKS_HOST: str = 'localhost'
    KVROCKS_PORT: int = 6666
    KVROCKS_DB: int = 0
    KVROCKS_PASSWORD: str = ''
    KVROCKS_KEY_PREFIX: str = ''  # Per-worker prefix for test isolation
    KVROCKS_CLUSTER_MODE: bool = False
    KVROCKS_CLUSTER_NODES: str = ''  # "host1:port1,host2:port2"
    REDIS_DECODE_RESPONSES: bool = True

    # Kvrocks Connection Pool Configuration
    KVROCKS_POOL_MAX_CONNECTIONS: int = 100  # Max connections in pool
    KVROCKS_POOL_SOCKET_TIMEOUT: int = 10  # Socket read/write timeout (seconds)
    KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT: int = 10  # Connection timeout (seconds)
    KVROCKS_POOL_SOCKET_KEEPALIVE: bool = True  # Enable TCP keepalive
    KVROCKS_POOL_HEALTH_CHECK_INTERVAL: int = 30  # Health check interval (seconds)

    # Seat holds
    HOLD_TTL_SECONDS: int = 600  # Payment window: 10 minutes
    MAX_SEATS_PER_BOOKING: int = 10

    # Expiry sweeper
    SWEEPER_ENABLED: bool = True
    SWEEP_INTERVAL_SECONDS: float = 20.0
    SWEEP_BATCH_SIZE: int = 500

    # Availability snapshots (must not be staler than one sweep)
    AVAILABILITY_CACHE_TTL_SECONDS: float = 5.0

    # Retry policy for idempotent reads against the state store
    TRANSIENT_RETRY_ATTEMPTS: int = 3
    TRANSIENT_RETRY_BASE_DELAY: float = 0.05
    TRANSIENT_RETRY_MAX_DELAY: float = 1.0

    # Pricing
    INR_TO_USD_RATE: float = 0.011

    @model_validator(mode='after')
    def validate_timing(self) -> Self:
        if self.HOLD_TTL_SECONDS <= 0:
            raise ValueError('HOLD_TTL_SECONDS must be positive')
        if self.SWEEP_INTERVAL_SECONDS <= 0:
            raise ValueError('SWEEP_INTERVAL_SECONDS must be positive')
        if self.AVAILABILITY_CACHE_TTL_SECONDS > self.SWEEP_INTERVAL_SECONDS:
            raise ValueError(
                'AVAILABILITY_CACHE_TTL_SECONDS must not exceed SWEEP_INTERVAL_SECONDS'
            )
        if self.TRANSIENT_RETRY_ATTEMPTS < 1:
            raise ValueError('TRANSIENT_RETRY_ATTEMPTS must be at least 1')
        return self


settings = Settings()  # type: ignore
