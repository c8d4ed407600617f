"""Groups, group members and friends."""

from __future__ import annotations

import itertools
import uuid
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kaotonamae.models import (
    Friend,
    Group,
    GroupListElement,
    GroupMember,
    NotFoundError,
    StoreError,
)
from kaotonamae.users import get_user_info

_GROUP_NAME_PREFIX = "New Group #"


@contextmanager
def _writing(session: Session, message: str) -> Iterator[None]:
    """Commit what the block changes; roll back and raise StoreError on failure."""
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


def _query(session: Session, statement: Any) -> list[Any]:
    try:
        return list(session.scalars(statement).all())
    except SQLAlchemyError as exc:
        raise StoreError("records could not be read") from exc


def _text(value: Any) -> str:
    return "" if value is None else str(value)


# Groups


def get_all_groups(session: Session) -> list[Group]:
    """Every group."""
    return _list_all(session, Group)


def get_groups_by_user(session: Session, user_id: str) -> list[GroupListElement]:
    """Short entries for the groups a user owns."""
    groups = _query(session, select(Group).where(Group.user_id == user_id))
    return [GroupListElement.from_group(group) for group in groups]


def _first_group(session: Session, group_id: str) -> Group | None:
    statement = (
        select(Group)
        .where(Group.group_id == group_id)
        .order_by(Group.user_id, Group.group_id)
        .limit(1)
    )
    return session.scalars(statement).first()


def get_group(session: Session, group_id: str) -> Group:
    """One group by its identifier; NotFoundError if there is none."""
    try:
        group = _first_group(session, group_id)
    except SQLAlchemyError as exc:
        raise NotFoundError(f"no group {group_id!r}") from exc
    if group is None:
        raise NotFoundError(f"no group {group_id!r}")
    return group


def next_available_group_name(existing_names: Iterable[str]) -> str:
    """The first "New Group #n", counting from 1, not among the given names."""
    taken = set(existing_names)
    for number in itertools.count(1):
        candidate = f"{_GROUP_NAME_PREFIX}{number}"
        if candidate not in taken:
            return candidate
    raise AssertionError("unreachable")


def create_group(session: Session, user_id: str) -> Group:
    """Create a group with a fresh identifier and an unused default name."""
    names = _query(session, select(Group.group_name).where(Group.user_id == user_id))
    now = datetime.now()
    group = Group(
        user_id=user_id,
        group_id=str(uuid.uuid4()),
        group_name=next_available_group_name(names),
        overview="",
        created_at=now,
        updated_at=now,
    )
    with _writing(session, "グループ作成中にエラーが発生しました"):
        session.add(group)
    return group


def update_group(session: Session, data: Mapping[str, Any]) -> Group:
    """Overwrite name and overview of the group named by data["groupId"]."""
    group_id = _text(data.get("groupId"))
    try:
        existing = _first_group(session, group_id)
    except SQLAlchemyError as exc:
        raise StoreError("グループの検索中にエラーが発生しました") from exc
    if existing is None:
        raise NotFoundError("グループが見つかりません")

    with _writing(session, "グループ更新中にエラーが発生しました"):
        existing.group_name = _text(data.get("groupName"))
        existing.overview = _text(data.get("overview"))
        existing.updated_at = datetime.now()
    return existing


# Group members


def get_all_group_members(session: Session) -> list[GroupMember]:
    """Every membership."""
    return _list_all(session, GroupMember)


def get_group_members(session: Session, group_id: str) -> list[GroupMember]:
    """The members of one group."""
    return _query(session, select(GroupMember).where(GroupMember.group_id == group_id))


def add_group_member(session: Session, user_id: str, group_id: str) -> GroupMember:
    """Add a user to a group, copying the user's name and photo."""
    try:
        info = get_user_info(session, user_id)
    except NotFoundError as exc:
        raise NotFoundError("フレンド情報の取得にエラーが発生しました") from exc
    now = datetime.now()
    member = GroupMember(
        group_id=group_id,
        user_id=user_id,
        member_name=info.full_name(),
        member_photo=_text(info.photo),
        created_at=now,
        updated_at=now,
    )
    with _writing(session, "グループメンバーの追加中にエラーが発生しました"):
        session.add(member)
    return member


def delete_group_member(session: Session, user_id: str, group_id: str) -> None:
    """Remove a user from a group; NotFoundError if not a member."""
    statement = (
        select(GroupMember)
        .where(GroupMember.user_id == user_id, GroupMember.group_id == group_id)
        .order_by(GroupMember.group_id, GroupMember.user_id)
        .limit(1)
    )
    try:
        member = session.scalars(statement).first()
    except SQLAlchemyError as exc:
        raise NotFoundError("グループメンバーが見つかりません") from exc
    if member is None:
        raise NotFoundError("グループメンバーが見つかりません")
    with _writing(session, "グループメンバーの削除中にエラーが発生しました"):
        session.delete(member)


# Friends


def get_all_friends(session: Session) -> list[Friend]:
    """Every friend entry."""
    return _list_all(session, Friend)


def get_friends(session: Session, user_id: str) -> list[Friend]:
    """The friend list of one user."""
    return _query(session, select(Friend).where(Friend.user_id == user_id))


def add_friend(session: Session, my_user_id: str, friend_user_id: str) -> Friend:
    """Add a user to another's friend list, copying name and photo."""
    try:
        info = get_user_info(session, friend_user_id)
    except NotFoundError as exc:
        raise NotFoundError("フレンド情報の取得にエラーが発生しました") from exc
    now = datetime.now()
    friend = Friend(
        user_id=my_user_id,
        friend_id=friend_user_id,
        friend_name=info.full_name(),
        friend_photo=_text(info.photo),
        created_at=now,
        updated_at=now,
    )
    with _writing(session, "フレンドの登録中にエラーが発生しました"):
        session.add(friend)
    return friend


def delete_friend(session: Session, my_user_id: str, friend_user_id: str) -> None:
    """Remove a friend entry; NotFoundError if there is none."""
    statement = (
        select(Friend)
        .where(Friend.user_id == my_user_id, Friend.friend_id == friend_user_id)
        .order_by(Friend.user_id, Friend.friend_id, Friend.friend_name)
        .limit(1)
    )
    try:
        friend = session.scalars(statement).first()
    except SQLAlchemyError as exc:
        raise NotFoundError("該当のフレンドが見つかりません") from exc
    if friend is None:
        raise NotFoundError("該当のフレンドが見つかりません")
    with _writing(session, "該当のフレンドの削除中にエラーが発生しました"):
        session.delete(friend)