import pytest
from fastapi.testclient import TestClient

from app import models  # noqa: F401
from app.config import Settings
from app.database import Base, build_engine, build_session_factory
from app.main import create_app


def make_settings(**overrides) -> Settings:
    values = {"database_url": "sqlite://", "log_file": "", "log_level": "WARNING"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db():
    """서비스 단위 테스트용 인메모리 DB 세션"""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
