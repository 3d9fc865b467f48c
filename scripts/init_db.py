#!/usr/bin/env python3
"""
데이터베이스 초기화 스크립트
"""
import sys
from pathlib import Path

# 프로젝트 루트를 Python path에 추가
sys.path.append(str(Path(__file__).parent.parent))

from app import models  # noqa: F401
from app.config import get_settings
from app.database import Base, build_engine, build_session_factory
from app.services.auth_service import AuthService
from app.utils.logger import log, setup_logger


def create_tables(engine):
    """모든 테이블 생성"""
    Base.metadata.create_all(bind=engine)
    log.info("database tables created")


def purge_expired_sessions(session_factory):
    """만료된 세션 정리"""
    db = session_factory()
    try:
        count = AuthService.cleanup_expired_sessions(db)
    finally:
        db.close()
    log.info(f"expired sessions removed: {count}")
    return count


if __name__ == "__main__":
    settings = get_settings()
    setup_logger(settings.log_level, settings.log_file or None)
    engine = build_engine(settings.database_url, echo=settings.database_echo)
    create_tables(engine)
    purge_expired_sessions(build_session_factory(engine))
    engine.dispose()
