# pttboard/config.py
import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "pttboard"
    # 비워두면 저장소 없이 동작 (읽기는 빈 결과, 쓰기는 실패)
    DATABASE_URL: Optional[str] = None
    SESSION_SECRET: str = "dev-secret"
    SESSION_COOKIE_NAME: str = "app_session_id"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 365
    # 이 open_id 로 가입한 사용자는 자동으로 admin
    OWNER_OPEN_ID: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


settings = Settings()
