import sys
from functools import lru_cache
from typing import List, Optional

from loguru import logger
from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide configuration, read once at startup and never mutated."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        frozen=True,
        populate_by_name=True,
    )

    executor_url: str = Field(
        default='http://localhost:8080/execute',
        validation_alias=AliasChoices('EXECUTOR_URL', 'LINK'),
    )
    executor_timeout_seconds: float = 30.0

    auth_required: bool = False
    shared_secret: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices('AUTH_SECRET', 'SHARED_SECRET'),
    )
    freshness_window_ms: int = Field(default=300_000, ge=0)

    allowed_origins: List[str] = Field(default_factory=lambda: ['*'])

    host: str = '0.0.0.0'
    port: int = 3000

    verify_delay_min_ms: int = Field(default=500, ge=0)
    verify_delay_max_ms: int = Field(default=1500, ge=0)

    log_level: str = 'INFO'

    @model_validator(mode='after')
    def _check_consistency(self):
        if self.auth_required and not self.shared_secret:
            raise ValueError('AUTH_REQUIRED is set but AUTH_SECRET is empty')
        if self.verify_delay_max_ms < self.verify_delay_min_ms:
            raise ValueError('VERIFY_DELAY_MAX_MS must be >= VERIFY_DELAY_MIN_MS')
        return self

    @property
    def verify_delay_seconds(self):
        return self.verify_delay_min_ms / 1000.0, self.verify_delay_max_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = 'INFO') -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format='<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | '
               '<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>',
    )
