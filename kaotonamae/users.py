"""Accounts, profiles and login credentials."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kaotonamae.models import Auth, NotFoundError, StoreError, User, UserInfo

DEFAULT_LAST_NAME = "User Last Name"
DEFAULT_FIRST_NAME = "User First Name"

# Profile fields an update overwrites, as (attribute, JSON key). The age is
# deliberately not among them: an update leaves it as it was.
_UPDATABLE_FIELDS = (
    ("user_last_name", "userLastName"),
    ("user_first_name", "userFirstName"),
    ("last_name_furigana", "lastNameFurigana"),
    ("first_name_furigana", "firstNameFurigana"),
    ("nickname", "nickname"),
    ("gender", "gender"),
    ("photo", "photo"),
    ("birthday", "birthday"),
    ("hobbys", "hobbys"),
    ("organization", "organization"),
    ("favorite_color", "favoriteColor"),
    ("favorite_animal", "favoriteAnimal"),
    ("favorite_place", "favoritePlace"),
    ("holiday_activity", "holidayActivity"),
    ("weaknesses", "weaknesses"),
    ("language", "language"),
)


@contextmanager
def _writing(session: Session, message: str) -> Iterator[None]:
    """Commit what the block adds; roll back and raise StoreError on failure."""
    try:
        yield
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise StoreError(message) from exc


def _list_all(session: Session, model: type) -> list[Any]:
    try:
        return list(session.scalars(select(model)).all())
    except SQLAlchemyError as exc:
        raise NotFoundError("records could not be read") from exc


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def get_all_users(session: Session) -> list[User]:
    """Every user."""
    return _list_all(session, User)


def create_user(session: Session, user_id: str) -> User:
    """Create a user together with a default profile."""
    now = datetime.now()
    user = User(user_id=user_id, created_at=now, updated_at=now)
    with _writing(session, "ユーザー作成中にエラーが発生しました"):
        session.add(user)
    create_user_info(session, user_id)
    return user


def get_all_user_infos(session: Session) -> list[UserInfo]:
    """Every profile."""
    return _list_all(session, UserInfo)


def _find_user_info(session: Session, user_id: str) -> UserInfo | None:
    statement = (
        select(UserInfo)
        .where(UserInfo.user_id == user_id)
        .order_by(UserInfo.user_id)
        .limit(1)
    )
    return session.scalars(statement).first()


def get_user_info(session: Session, user_id: str) -> UserInfo:
    """The profile of one user; NotFoundError if there is none."""
    try:
        info = _find_user_info(session, user_id)
    except SQLAlchemyError as exc:
        raise NotFoundError(f"no profile for user {user_id!r}") from exc
    if info is None:
        raise NotFoundError(f"no profile for user {user_id!r}")
    return info


def create_user_info(session: Session, user_id: str) -> UserInfo:
    """Create a profile with placeholder names."""
    now = datetime.now()
    info = UserInfo(
        user_id=user_id,
        user_last_name=DEFAULT_LAST_NAME,
        user_first_name=DEFAULT_FIRST_NAME,
        created_at=now,
        updated_at=now,
    )
    with _writing(session, "ユーザー作成中にエラーが発生しました"):
        session.add(info)
    return info


def update_user_info(session: Session, data: Mapping[str, Any]) -> UserInfo:
    """Overwrite a profile from JSON-keyed data; fields left out become empty."""
    user_id = _text(data.get("userId"))
    try:
        existing = _find_user_info(session, user_id)
    except SQLAlchemyError as exc:
        raise StoreError("ユーザーの検索中にエラーが発生しました") from exc
    if existing is None:
        raise NotFoundError("ユーザーが見つかりません")

    with _writing(session, "ユーザー更新中にエラーが発生しました"):
        for attribute, key in _UPDATABLE_FIELDS:
            setattr(existing, attribute, _text(data.get(key)))
        existing.updated_at = datetime.now()
    return existing


def get_all_auths(session: Session) -> list[Auth]:
    """Every set of credentials."""
    return _list_all(session, Auth)


def create_auth(session: Session, user_id: str, email: str, password: str) -> Auth:
    """Store credentials for a user."""
    now = datetime.now()
    auth = Auth(
        user_id=user_id,
        email=email,
        password=password,
        created_at=now,
        updated_at=now,
    )
    with _writing(session, "認証情報の作成中にエラーが発生しました"):
        session.add(auth)
    return auth