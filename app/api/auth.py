from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from app.config import Settings, settings_from_request
from app.database import get_db
from app.models.session import Session as UserSession
from app.services.auth_service import AuthService

router = APIRouter()


def ensure_utf8(value: str) -> str:
    """UTF-8로 인코딩할 수 없는 문자열(짝 없는 서로게이트 등) 거부"""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError("string is not valid UTF-8") from e
    return value


class LoginRequest(BaseModel):
    username: str
    # 해시되지 않은 비밀번호
    password: str

    @field_validator("username", "password")
    @classmethod
    def check_utf8(cls, value: str) -> str:
        return ensure_utf8(value)


# 의존성: 유효한 세션 필수
# DB 조회와 해시 계산은 블로킹이므로 def로 선언 (스레드풀에서 실행)
def require_session(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(settings_from_request),
) -> UserSession:
    """쿠키에서 세션 ID를 추출하여 세션 검증"""
    session_id = request.cookies.get(settings.session_cookie_name)
    return AuthService.authenticate(db, session_id)


@router.post("/login")
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(settings_from_request),
):
    """로그인"""
    session_id = AuthService.login(
        db, login_data.username, login_data.password, settings.session_ttl_seconds
    )

    response = Response(status_code=status.HTTP_200_OK)
    # 쿠키 수명은 서버 측 세션 만료와 동일
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="lax",
    )
    return response
