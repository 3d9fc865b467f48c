import time

import pytest
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from app.errors import Conflict, Forbidden, InternalError, StorageError, Unauthorized
from app.models.session import Session as UserSession
from app.models.user import User
from app.services.auth_service import AuthService


def _register(db, name="test", password="s3cr3t"):
    return AuthService.create_user(db, name=name, display_name=name, description="blah", password=password)


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def test_hash_is_deterministic_for_same_salt():
    assert AuthService.hash_password("s3cr3t", "salt") == AuthService.hash_password("s3cr3t", "salt")


def test_hash_differs_for_different_passwords():
    assert AuthService.hash_password("s3cr3t", "salt") != AuthService.hash_password("s3cr3t!", "salt")


def test_hash_uses_random_salt_by_default():
    assert AuthService.hash_password("s3cr3t") != AuthService.hash_password("s3cr3t")


def test_verify_password():
    stored = AuthService.hash_password("s3cr3t")
    assert AuthService.verify_password("s3cr3t", stored)
    assert not AuthService.verify_password("wrong", stored)


def test_verify_password_rejects_malformed_hash():
    assert not AuthService.verify_password("s3cr3t", "not-a-hash")
    assert not AuthService.verify_password("s3cr3t", "")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def test_create_user_stores_hash_and_timestamps(db):
    user = _register(db)
    assert user.id == 1
    assert user.password != "s3cr3t"
    assert AuthService.verify_password("s3cr3t", user.password)
    assert user.created_at is not None
    assert user.updated_at is not None


def test_duplicate_name_is_conflict(db):
    _register(db)
    with pytest.raises(Conflict) as exc_info:
        _register(db, password="other")

    assert isinstance(exc_info.value, StorageError)
    assert exc_info.value.status_code == 409
    assert db.query(User).filter(User.name == "test").count() == 1


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

def test_login_issues_unique_tokens(db):
    _register(db)
    tokens = {AuthService.login(db, "test", "s3cr3t") for _ in range(5)}
    assert len(tokens) == 5
    assert db.query(UserSession).count() == 5


def test_login_session_expires_after_ttl(db):
    user = _register(db)
    before = int(time.time())
    session_id = AuthService.login(db, "test", "s3cr3t", ttl_seconds=600)

    session = db.query(UserSession).filter(UserSession.id == session_id).one()
    assert session.user_id == user.id
    assert before + 600 <= session.expires <= int(time.time()) + 600


def test_wrong_password_and_unknown_user_look_the_same(db):
    _register(db)
    with pytest.raises(Unauthorized) as wrong_password:
        AuthService.login(db, "test", "nope")
    with pytest.raises(Unauthorized) as unknown_user:
        AuthService.login(db, "ghost", "s3cr3t")

    assert wrong_password.value.detail == unknown_user.value.detail
    assert db.query(UserSession).count() == 0


# ---------------------------------------------------------------------------
# Session validation
# ---------------------------------------------------------------------------

def test_authenticate_missing_token_is_forbidden(db):
    with pytest.raises(Forbidden):
        AuthService.authenticate(db, None)
    with pytest.raises(Forbidden):
        AuthService.authenticate(db, "")


def test_authenticate_unknown_token_is_forbidden(db):
    with pytest.raises(Forbidden):
        AuthService.authenticate(db, "no-such-session")


def test_authenticate_valid_session(db):
    user = _register(db)
    session_id = AuthService.login(db, "test", "s3cr3t")

    session = AuthService.authenticate(db, session_id)
    assert session.user_id == user.id


def test_expired_session_is_rejected_and_deleted(db):
    user = _register(db)
    session_id = AuthService.create_session(db, user.id, ttl_seconds=600, now=1000)

    # 만료 시각과 같으면 아직 유효
    assert AuthService.authenticate(db, session_id, now=1600).id == session_id

    with pytest.raises(Unauthorized) as exc_info:
        AuthService.authenticate(db, session_id, now=1601)
    assert exc_info.value.detail == "session has expired"
    assert AuthService.get_session(db, session_id) is None


def test_expired_session_rejected_even_if_delete_fails(db, monkeypatch):
    user = _register(db)
    session_id = AuthService.create_session(db, user.id, now=0)

    def broken_delete(instance):
        raise SQLAlchemyError("delete failed")

    monkeypatch.setattr(db, "delete", broken_delete)

    with pytest.raises(Unauthorized):
        AuthService.authenticate(db, session_id)
    monkeypatch.undo()

    # 삭제 실패 후에도 계속 거부된다
    with pytest.raises(Unauthorized):
        AuthService.authenticate(db, session_id)


def test_cleanup_expired_sessions(db):
    user = _register(db)
    AuthService.create_session(db, user.id, ttl_seconds=10, now=100)
    AuthService.create_session(db, user.id, ttl_seconds=10, now=100)
    live = AuthService.create_session(db, user.id, ttl_seconds=10, now=1000)

    assert AuthService.cleanup_expired_sessions(db, now=500) == 2
    assert [s.id for s in db.query(UserSession).all()] == [live]


# ---------------------------------------------------------------------------
# Storage failures
# ---------------------------------------------------------------------------

def _broken_commit():
    raise SQLAlchemyError("disk gone")


def test_create_user_commit_failure_is_internal_error(db, monkeypatch):
    monkeypatch.setattr(db, "commit", _broken_commit)

    with pytest.raises(InternalError) as exc_info:
        _register(db)
    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "disk gone"

    monkeypatch.undo()
    assert db.query(User).count() == 0


def test_create_session_commit_failure_is_internal_error(db, monkeypatch):
    user = _register(db)
    monkeypatch.setattr(db, "commit", _broken_commit)

    with pytest.raises(InternalError) as exc_info:
        AuthService.create_session(db, user.id)
    assert exc_info.value.status_code == 500

    monkeypatch.undo()
    assert db.query(UserSession).count() == 0
    assert db.query(User).count() == 1


def test_rollback_failure_is_logged_and_original_error_kept(db, monkeypatch):
    messages = []
    handler_id = logger.add(messages.append, level="ERROR", format="{message}")

    def broken_rollback():
        raise SQLAlchemyError("rollback gone")

    monkeypatch.setattr(db, "commit", _broken_commit)
    monkeypatch.setattr(db, "rollback", broken_rollback)
    try:
        with pytest.raises(InternalError) as exc_info:
            _register(db)
    finally:
        logger.remove(handler_id)

    assert exc_info.value.detail == "disk gone"
    assert any("rollback failed: rollback gone" in str(m) for m in messages)
