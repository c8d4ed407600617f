"""Database tables and their JSON shapes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class StoreError(Exception):
    """A database operation could not be carried out."""


class NotFoundError(StoreError, LookupError):
    """The requested record does not exist."""


class Base(DeclarativeBase):
    """Declarative base shared by every table."""


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _text(value: str | None) -> str:
    return value if value is not None else ""


def _text_column(*, primary_key: bool = False, index: bool = False) -> Any:
    return mapped_column(String(255), primary_key=primary_key, index=index, default="")


def _created_column() -> Any:
    return mapped_column(DateTime, default=datetime.now)


def _updated_column() -> Any:
    return mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)


class User(Base):
    """An account; the other tables hang off its identifier."""

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    updated_at: Mapped[datetime] = _updated_column()
    created_at: Mapped[datetime] = _created_column()

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": _text(self.user_id),
            "UserInfos": None,
            "Auths": None,
            "Friends": None,
            "Groups": None,
            "updatedAt": _iso(self.updated_at),
            "createdAt": _iso(self.created_at),
        }


class Auth(Base):
    """Login credentials of a user."""

    __tablename__ = "auths"

    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id"), primary_key=True, index=True
    )
    email: Mapped[str] = _text_column()
    password: Mapped[str] = _text_column()
    updated_at: Mapped[datetime] = _updated_column()
    created_at: Mapped[datetime] = _created_column()

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": _text(self.user_id),
            "email": _text(self.email),
            "password": _text(self.password),
            "updatedAt": _iso(self.updated_at),
            "createdAt": _iso(self.created_at),
        }


# (attribute, JSON key) for every text field of a profile, in output order.
_USER_INFO_TEXT = (
    ("user_last_name", "userLastName"),
    ("user_first_name", "userFirstName"),
    ("last_name_furigana", "lastNameFurigana"),
    ("first_name_furigana", "firstNameFurigana"),
    ("nickname", "nickname"),
    ("gender", "gender"),
    ("photo", "photo"),
    ("birthday", "birthday"),
    ("age", "age"),
    ("hobbys", "hobbys"),
    ("organization", "organization"),
    ("favorite_color", "favoriteColor"),
    ("favorite_animal", "favoriteAnimal"),
    ("favorite_place", "favoritePlace"),
    ("holiday_activity", "holidayActivity"),
    ("weaknesses", "weaknesses"),
    ("language", "language"),
)


class UserInfo(Base):
    """Profile of a user: names, photo and personal details."""

    __tablename__ = "user_infos"

    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id"), primary_key=True, index=True
    )
    user_last_name: Mapped[str] = _text_column()
    user_first_name: Mapped[str] = _text_column()
    last_name_furigana: Mapped[str] = _text_column()
    first_name_furigana: Mapped[str] = _text_column()
    nickname: Mapped[str] = _text_column()
    gender: Mapped[str] = _text_column()
    photo: Mapped[str] = _text_column()
    birthday: Mapped[str] = _text_column()
    age: Mapped[str] = _text_column()
    hobbys: Mapped[str] = _text_column()
    organization: Mapped[str] = _text_column()
    favorite_color: Mapped[str] = _text_column()
    favorite_animal: Mapped[str] = _text_column()
    favorite_place: Mapped[str] = _text_column()
    holiday_activity: Mapped[str] = _text_column()
    weaknesses: Mapped[str] = _text_column()
    language: Mapped[str] = _text_column()
    updated_at: Mapped[datetime] = _updated_column()
    created_at: Mapped[datetime] = _created_column()

    def full_name(self) -> str:
        """Last name and first name separated by a space."""
        return f"{_text(self.user_last_name)} {_text(self.user_first_name)}"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"userId": _text(self.user_id)}
        for attribute, key in _USER_INFO_TEXT:
            result[key] = _text(getattr(self, attribute))
        result["updatedAt"] = _iso(self.updated_at)
        result["createdAt"] = _iso(self.created_at)
        return result


class Group(Base):
    """A named group owned by a user."""

    __tablename__ = "groups"

    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id"), primary_key=True
    )
    group_id: Mapped[str] = mapped_column(String(255), primary_key=True, index=True)
    group_name: Mapped[str] = _text_column()
    overview: Mapped[str] = _text_column()
    updated_at: Mapped[datetime] = _updated_column()
    created_at: Mapped[datetime] = _created_column()

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": _text(self.user_id),
            "groupId": _text(self.group_id),
            "groupName": _text(self.group_name),
            "overview": _text(self.overview),
            "GroupMembers": None,
            "updatedAt": _iso(self.updated_at),
            "createdAt": _iso(self.created_at),
        }


@dataclass(frozen=True)
class GroupListElement:
    """Short form of a group used in listings."""

    group_id: str
    group_name: str

    @classmethod
    def from_group(cls, group: Group) -> GroupListElement:
        return cls(group_id=_text(group.group_id), group_name=_text(group.group_name))

    def to_dict(self) -> dict[str, Any]:
        return {"groupId": self.group_id, "groupName": self.group_name}


class GroupMember(Base):
    """Membership of a user in a group, with a copy of name and photo."""

    __tablename__ = "group_members"

    group_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    member_name: Mapped[str] = _text_column()
    member_photo: Mapped[str] = _text_column()
    updated_at: Mapped[datetime] = _updated_column()
    created_at: Mapped[datetime] = _created_column()

    def to_dict(self) -> dict[str, Any]:
        return {
            "groupId": _text(self.group_id),
            "userId": _text(self.user_id),
            "memberName": _text(self.member_name),
            "memberPhoto": _text(self.member_photo),
            "updatedAt": _iso(self.updated_at),
            "createdAt": _iso(self.created_at),
        }


class Friend(Base):
    """A friend entry in a user's list, with a copy of name and photo."""

    __tablename__ = "friends"

    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id"), primary_key=True, index=True
    )
    friend_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    friend_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    friend_photo: Mapped[str] = _text_column()
    updated_at: Mapped[datetime] = _updated_column()
    created_at: Mapped[datetime] = _created_column()

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": _text(self.user_id),
            "friendId": _text(self.friend_id),
            "friendName": _text(self.friend_name),
            "friendPhoto": _text(self.friend_photo),
            "updatedAt": _iso(self.updated_at),
            "createdAt": _iso(self.created_at),
        }