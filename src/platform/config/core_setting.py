from pathlib import Path
from typing import Annotated, List, Literal

import orjson
from pydantic import SecretStr, field_validator
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

    PROJECT_NAME: str = 'Concert Ticketing'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security (principal is issued by the identity service, we only verify it)
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS, comma separated or a JSON array (NoDecode hands the raw string to the validator)
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith('['):
            return orjson.loads(v)
        elif isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'concert_ticketing'

    # Full URL override (tests point this at sqlite+aiosqlite)
    DATABASE_URL: str = ''

    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Orders
    ORDER_TTL_MINUTES: int = 15
    ORDER_MAX_TICKETS: int = 10
    ORDER_REF_PREFIX: str = 'ORDER-'

    # Tickets
    TICKET_CODE_PREFIX: str = 'TKT-'

    # Midtrans payment gateway
    MIDTRANS_SERVER_KEY: SecretStr = SecretStr('SB-Mid-server-change-me')
    MIDTRANS_ENVIRONMENT: Literal['sandbox', 'production'] = 'sandbox'
    PAYMENT_GATEWAY_TIMEOUT_SECONDS: float = 10.0

    @property
    def MIDTRANS_SNAP_BASE_URL(self) -> str:
        if self.MIDTRANS_ENVIRONMENT == 'production':
            return 'https://app.midtrans.com'
        return 'https://app.sandbox.midtrans.com'

    @property
    def MIDTRANS_API_BASE_URL(self) -> str:
        if self.MIDTRANS_ENVIRONMENT == 'production':
            return 'https://api.midtrans.com'
        return 'https://api.sandbox.midtrans.com'

    # Maintenance sweeps (expiry, issuance recovery, gateway status sync)
    MAINTENANCE_ENABLED: bool = True
    MAINTENANCE_INTERVAL_SECONDS: float = 60.0
    MAINTENANCE_BATCH_SIZE: int = 100
    PAYMENT_STATUS_SYNC_AFTER_MINUTES: int = 5


settings = Settings()  # type: ignore
