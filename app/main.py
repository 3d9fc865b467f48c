from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from app import models  # noqa: F401  (테이블 메타데이터 등록)
from app.config import Settings, get_settings
from app.database import Base, build_engine, build_session_factory
from app.errors import InvalidRequest
from app.utils.logger import log, setup_logger

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """시작 시 테이블 생성, 종료 시 커넥션 풀 정리"""
    # 데이터베이스 테이블 생성
    Base.metadata.create_all(bind=app.state.engine)
    log.info("isupipe server started")

    yield

    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """FastAPI 앱 생성 (DB 엔진과 세션 팩토리는 app.state에 보관)"""
    if settings is None:
        settings = get_settings()

    setup_logger(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title="isupipe",
        description="Video streaming platform backend",
        version=VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    engine = build_engine(settings.database_url, echo=settings.database_echo)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # 미들웨어 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts,
    )

    # 요청 본문 검증 실패는 400으로 통일
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error = InvalidRequest()
        return JSONResponse(status_code=error.status_code, content={"detail": error.detail})

    # API 라우터 등록
    from app.api import auth, users, channels
    app.include_router(users.router, prefix="/user", tags=["user"])
    app.include_router(auth.router, tags=["authentication"])
    app.include_router(channels.router, prefix="/channel", tags=["channel"])

    # 헬스 체크
    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "isupipe", "version": VERSION}

    return app


# uvicorn --factory app.main:create_app
if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
