from functools import lru_cache
from pydantic_settings import BaseSettings
from fastapi import Request
from typing import List


class Settings(BaseSettings):
    # App
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080

    # Database
    database_url: str = "sqlite:///./isupipe.db"
    database_echo: bool = False

    # Session
    session_cookie_name: str = "SESSIONID"
    session_ttl_seconds: int = 600  # 10분, 쿠키 max-age와 동일
    enforce_profile_ownership: bool = False

    # Security
    allowed_hosts: List[str] = ["*"]
    cors_origins: List[str] = ["http://localhost:3000"]

    # Logging
    log_level: str = "INFO"
    log_file: str = "./logs/app.log"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings():
    return Settings()


def settings_from_request(request: Request) -> Settings:
    """앱 팩토리에서 주입한 설정 반환"""
    return request.app.state.settings
