import json
from datetime import datetime

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kaotonamae.models import (
    Auth,
    Base,
    Friend,
    Group,
    GroupListElement,
    GroupMember,
    NotFoundError,
    StoreError,
    User,
    UserInfo,
)


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine, expire_on_commit=False) as s:
        yield s
    engine.dispose()


def test_user_to_dict_after_commit(session):
    user = User(user_id="u1")
    session.add(user)
    session.commit()
    data = user.to_dict()
    assert data["userId"] == "u1"
    assert data["UserInfos"] is None and data["Groups"] is None
    assert datetime.fromisoformat(data["createdAt"]) == user.created_at
    assert datetime.fromisoformat(data["updatedAt"]) == user.updated_at


def test_auth_to_dict_round_trips_through_json(session):
    session.add(User(user_id="u1"))
    password = "password"
    auth = Auth(user_id="u1", email="someone@example.com", password=password)
    session.add(auth)
    session.commit()
    data = auth.to_dict()
    assert data["email"] == "someone@example.com"
    assert data["password"] == password
    assert json.loads(json.dumps(data)) == data


def test_user_info_text_fields_default_to_empty(session):
    info = UserInfo(user_id="u2", nickname="Taro-chan")
    session.add(info)
    session.commit()
    stored = session.get(UserInfo, "u2")
    assert stored.nickname == "Taro-chan"
    assert stored.gender == ""
    data = stored.to_dict()
    assert data["nickname"] == "Taro-chan"
    assert data["favoriteColor"] == ""


def test_unsaved_user_info_to_dict_fills_blanks():
    data = UserInfo(user_id="u3").to_dict()
    assert data["userId"] == "u3"
    assert data["language"] == ""
    assert data["createdAt"] is None


def test_full_name_joins_last_and_first():
    info = UserInfo(user_id="u1", user_last_name="Yamada", user_first_name="Taro")
    assert info.full_name() == "Yamada Taro"


def test_group_to_dict_and_list_element(session):
    session.add(User(user_id="u1"))
    group = Group(user_id="u1", group_id="g1", group_name="Club", overview="weekly")
    session.add(group)
    session.commit()
    data = group.to_dict()
    assert data["groupName"] == "Club"
    assert data["overview"] == "weekly"
    assert data["GroupMembers"] is None
    element = GroupListElement.from_group(group)
    assert element.to_dict() == {"groupId": "g1", "groupName": "Club"}


def test_group_member_composite_key_rejects_duplicate(session):
    session.add(GroupMember(group_id="g1", user_id="u1", member_name="A B"))
    session.commit()
    session.add(GroupMember(group_id="g1", user_id="u1", member_name="C D"))
    with pytest.raises(IntegrityError):
        session.commit()


def test_group_member_to_dict(session):
    member = GroupMember(group_id="g1", user_id="u9", member_name="A B", member_photo="p.png")
    session.add(member)
    session.commit()
    data = member.to_dict()
    assert data["memberName"] == "A B"
    assert data["memberPhoto"] == "p.png"
    assert data["groupId"] == "g1"


def test_friend_key_includes_name(session):
    session.add(User(user_id="u1"))
    session.add(Friend(user_id="u1", friend_id="f1", friend_name="Old Name"))
    session.add(Friend(user_id="u1", friend_id="f1", friend_name="New Name"))
    session.commit()
    count = session.scalar(select(func.count()).select_from(Friend))
    assert count == 2


def test_friend_to_dict(session):
    session.add(User(user_id="u1"))
    friend = Friend(user_id="u1", friend_id="f1", friend_name="Sato Hana", friend_photo="x.jpg")
    session.add(friend)
    session.commit()
    data = friend.to_dict()
    assert data["friendId"] == "f1"
    assert data["friendName"] == "Sato Hana"
    assert data["friendPhoto"] == "x.jpg"


def test_not_found_is_a_store_error_keeping_its_message():
    err = NotFoundError("missing")
    assert isinstance(err, StoreError)
    assert str(err) == "missing"