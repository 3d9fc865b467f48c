from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime

from app.api.auth import ensure_utf8, require_session
from app.config import Settings, settings_from_request
from app.database import get_db
from app.errors import Forbidden, InternalError, NotFound
from app.models.session import Session as UserSession
from app.models.user import User
from app.services.auth_service import AuthService
from app.utils.logger import log

router = APIRouter()


# Request/Response 모델
class PostUserRequest(BaseModel):
    name: str
    display_name: str
    description: str
    # 해시되지 않은 비밀번호
    password: str

    @field_validator("name", "display_name", "description", "password")
    @classmethod
    def check_utf8(cls, value: str) -> str:
        return ensure_utf8(value)


class UserResponse(BaseModel):
    id: int
    name: str
    display_name: str
    description: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class UserProfileResponse(BaseModel):
    name: str
    display_name: str
    description: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: PostUserRequest,
    db: Session = Depends(get_db)
):
    """사용자 등록"""
    user = AuthService.create_user(
        db,
        name=user_data.name,
        display_name=user_data.display_name,
        description=user_data.description,
        password=user_data.password,
    )
    return UserResponse.model_validate(user)


@router.get("")
async def get_user_session():
    # 미구현 (세션 정보를 반환하는 형태가 될 예정)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/{user_id}", response_model=UserProfileResponse)
def get_user(
    user_id: int,
    session: UserSession = Depends(require_session),
    db: Session = Depends(get_db),
    settings: Settings = Depends(settings_from_request),
):
    """사용자 상세 조회

    기본 설정에서는 유효한 세션만 있으면 경로의 user_id로 누구의 프로필이든 조회된다.
    enforce_profile_ownership 설정 시 본인 프로필만 허용.
    """
    if settings.enforce_profile_ownership and session.user_id != user_id:
        raise Forbidden("cannot read another user's profile")

    try:
        user = db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        log.error(f"failed to fetch user {user_id}: {e}")
        raise InternalError(str(e)) from e

    if not user:
        raise NotFound("user not found")

    return UserProfileResponse.model_validate(user)


# 사용자가 등록한 채널 목록
@router.get("/{user_id}/channel")
async def get_user_channels(user_id: str):
    return Response(status_code=status.HTTP_200_OK)


# 채널 구독
@router.post("/{user_id}/channel/{channel_id}/subscribe")
async def subscribe_channel(user_id: str, channel_id: str):
    return Response(status_code=status.HTTP_200_OK)


# 채널 구독 해제
@router.post("/{user_id}/channel/{channel_id}/unsubscribe")
async def unsubscribe_channel(user_id: str, channel_id: str):
    return Response(status_code=status.HTTP_200_OK)
