import hashlib
import hmac
import secrets
import time
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import Conflict, Forbidden, InternalError, Unauthorized
from app.models.user import User
from app.models.session import Session as UserSession
from app.utils.logger import log

PBKDF2_ITERATIONS = 100000
DEFAULT_SESSION_TTL = 600  # 10분


def _rollback(db: Session) -> None:
    """롤백 실패는 로그만 남기고 원래 오류를 우선"""
    try:
        db.rollback()
    except SQLAlchemyError as e:
        log.error(f"rollback failed: {e}")


class AuthService:
    """사용자 등록, 로그인 및 세션 관리 서비스"""

    @staticmethod
    def hash_password(password: str, salt: Optional[str] = None) -> str:
        """비밀번호를 해시화 (salt 미지정 시 랜덤 생성)"""
        if salt is None:
            salt = secrets.token_hex(32)
        pwd_hash = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt.encode('utf-8'), PBKDF2_ITERATIONS)
        return f"{salt}:{pwd_hash.hex()}"

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """비밀번호 검증"""
        try:
            salt, _ = password_hash.split(':')
        except (ValueError, AttributeError):
            return False
        candidate = AuthService.hash_password(password, salt)
        return hmac.compare_digest(candidate.encode('utf-8'), password_hash.encode('utf-8'))

    @staticmethod
    def create_user(db: Session, name: str, display_name: str, description: str, password: str) -> User:
        """새 사용자 생성

        이름 중복은 사전 조회 없이 DB의 UNIQUE 제약으로 판정한다.
        동시 등록 시 한쪽만 성공하고 나머지는 Conflict.
        """
        user = User(
            name=name,
            display_name=display_name,
            description=description,
            password=AuthService.hash_password(password),
        )

        try:
            db.add(user)
            db.commit()
        except IntegrityError as e:
            _rollback(db)
            log.info(f"duplicate user name: {name}")
            raise Conflict(f"user '{name}' already exists") from e
        except SQLAlchemyError as e:
            _rollback(db)
            log.error(f"failed to insert user {name}: {e}")
            raise InternalError(str(e)) from e

        db.refresh(user)
        log.info(f"user registered: id={user.id} name={user.name}")
        return user

    @staticmethod
    def authenticate_user(db: Session, username: str, password: str) -> User:
        """사용자 인증 (존재하지 않는 이름과 틀린 비밀번호는 동일하게 처리)"""
        try:
            # name은 UNIQUE이므로 한 건으로 특정된다
            user = db.query(User).filter(User.name == username).first()
        except SQLAlchemyError as e:
            log.error(f"failed to look up user {username}: {e}")
            raise InternalError(str(e)) from e

        if user is None:
            log.info(f"login failed: username={username}")
            raise Unauthorized()

        if username != user.name or not AuthService.verify_password(password, user.password):
            log.info(f"login failed: username={username}")
            raise Unauthorized()

        return user

    @staticmethod
    def create_session(db: Session, user_id: int, ttl_seconds: int = DEFAULT_SESSION_TTL,
                       now: Optional[int] = None) -> str:
        """세션 생성 (기본 10분)"""
        if now is None:
            now = int(time.time())
        session_id = secrets.token_urlsafe(32)

        session = UserSession(
            id=session_id,
            user_id=user_id,
            expires=now + ttl_seconds,
        )

        try:
            db.add(session)
            db.commit()
        except SQLAlchemyError as e:
            # 변경 계열이므로 롤백
            _rollback(db)
            log.error(f"failed to insert session for user {user_id}: {e}")
            raise InternalError(str(e)) from e

        return session_id

    @staticmethod
    def login(db: Session, username: str, password: str, ttl_seconds: int = DEFAULT_SESSION_TTL) -> str:
        """로그인 후 새 세션 ID 반환"""
        user = AuthService.authenticate_user(db, username, password)
        session_id = AuthService.create_session(db, user.id, ttl_seconds)
        log.info(f"login succeeded: user_id={user.id}")
        return session_id

    @staticmethod
    def get_session(db: Session, session_id: str) -> Optional[UserSession]:
        try:
            return db.query(UserSession).filter(UserSession.id == session_id).first()
        except SQLAlchemyError as e:
            log.error(f"failed to look up session: {e}")
            return None

    @staticmethod
    def authenticate(db: Session, session_id: Optional[str], now: Optional[int] = None) -> UserSession:
        """세션 검증

        세션이 없거나 저장되어 있지 않으면 Forbidden,
        만료되었으면 세션 행을 삭제 시도한 뒤 Unauthorized.
        """
        if not session_id:
            raise Forbidden()

        session = AuthService.get_session(db, session_id)
        if session is None:
            raise Forbidden()

        if now is None:
            now = int(time.time())

        if now > session.expires:
            # 만료된 세션은 다시 로그인해야 한다
            log.info(f"session expired: user_id={session.user_id}")
            try:
                db.delete(session)
                db.commit()
            except SQLAlchemyError as e:
                # 삭제 오류는 무시
                _rollback(db)
                log.warning(f"failed to delete the session info from DB: {e}")
            raise Unauthorized("session has expired")

        return session

    @staticmethod
    def cleanup_expired_sessions(db: Session, now: Optional[int] = None) -> int:
        """만료된 세션 정리"""
        if now is None:
            now = int(time.time())

        try:
            count = db.query(UserSession).filter(UserSession.expires < now).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError as e:
            _rollback(db)
            log.error(f"failed to clean up expired sessions: {e}")
            raise InternalError(str(e)) from e

        return count
