import uuid

import pytest
from sqlalchemy import create_engine

from kaotonamae.db import migrate, session_factory
from kaotonamae.models import NotFoundError, StoreError
from kaotonamae.social import (
    add_friend,
    add_group_member,
    create_group,
    delete_friend,
    delete_group_member,
    get_all_friends,
    get_all_group_members,
    get_all_groups,
    get_friends,
    get_group,
    get_group_members,
    get_groups_by_user,
    next_available_group_name,
    update_group,
)
from kaotonamae.users import create_user, update_user_info


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    migrate(engine)
    with session_factory(engine)() as db_session:
        yield db_session
    engine.dispose()


@pytest.fixture
def people(session):
    for user_id in ("alice", "bob"):
        create_user(session, user_id)
    update_user_info(
        session,
        {"userId": "bob", "userLastName": "Sato", "userFirstName": "Bob", "photo": "bob.png"},
    )
    return session


def test_next_name_on_empty_list():
    assert next_available_group_name([]) == "New Group #1"


def test_next_name_fills_first_gap():
    names = ["New Group #1", "New Group #3", "Other"]
    result = next_available_group_name(names)
    assert result == "New Group #2"
    assert result not in names


def test_create_group_assigns_unique_names_and_ids(session):
    first = create_group(session, "alice")
    second = create_group(session, "alice")
    assert first.group_name != second.group_name
    assert first.group_name == next_available_group_name([])
    assert second.group_name == next_available_group_name([first.group_name])
    assert str(uuid.UUID(first.group_id)) == first.group_id
    assert first.overview == ""
    assert len(get_all_groups(session)) == 2


def test_group_names_are_per_user(session):
    a = create_group(session, "alice")
    b = create_group(session, "bob")
    assert a.group_name == b.group_name


def test_get_groups_by_user_returns_short_entries(session):
    group = create_group(session, "alice")
    create_group(session, "bob")
    entries = get_groups_by_user(session, "alice")
    assert [e.to_dict() for e in entries] == [
        {"groupId": group.group_id, "groupName": group.group_name}
    ]
    assert get_groups_by_user(session, "nobody") == []


def test_get_group_and_missing_group(session):
    group = create_group(session, "alice")
    assert get_group(session, group.group_id).group_name == group.group_name
    with pytest.raises(NotFoundError):
        get_group(session, "missing")


def test_update_group_changes_name_and_overview(session):
    group = create_group(session, "alice")
    updated = update_group(
        session, {"groupId": group.group_id, "groupName": "Club", "overview": "weekly"}
    )
    assert (updated.group_name, updated.overview) == ("Club", "weekly")
    reread = get_group(session, group.group_id)
    assert reread.to_dict()["groupName"] == "Club"


def test_update_missing_group_raises(session):
    with pytest.raises(NotFoundError):
        update_group(session, {"groupId": "missing", "groupName": "x"})


def test_add_group_member_copies_profile(people):
    group = create_group(people, "alice")
    member = add_group_member(people, "bob", group.group_id)
    assert member.member_name == "Sato Bob"
    assert member.member_photo == "bob.png"
    members = get_group_members(people, group.group_id)
    assert [m.user_id for m in members] == ["bob"]
    assert len(get_all_group_members(people)) == 1


def test_add_group_member_unknown_user(session):
    with pytest.raises(NotFoundError):
        add_group_member(session, "ghost", "g1")


def test_add_group_member_twice_raises_store_error(people):
    add_group_member(people, "bob", "g1")
    with pytest.raises(StoreError):
        add_group_member(people, "bob", "g1")
    assert len(get_group_members(people, "g1")) == 1


def test_delete_group_member(people):
    add_group_member(people, "bob", "g1")
    add_group_member(people, "alice", "g1")
    delete_group_member(people, "bob", "g1")
    assert [m.user_id for m in get_group_members(people, "g1")] == ["alice"]
    with pytest.raises(NotFoundError):
        delete_group_member(people, "bob", "g1")


def test_add_friend_copies_profile(people):
    friend = add_friend(people, "alice", "bob")
    assert friend.friend_name == "Sato Bob"
    assert friend.to_dict()["friendPhoto"] == "bob.png"
    assert [f.friend_id for f in get_friends(people, "alice")] == ["bob"]
    assert get_friends(people, "bob") == []
    assert len(get_all_friends(people)) == 1


def test_add_friend_unknown_user(people):
    with pytest.raises(NotFoundError):
        add_friend(people, "alice", "ghost")
    assert get_all_friends(people) == []


def test_delete_friend(people):
    add_friend(people, "alice", "bob")
    delete_friend(people, "alice", "bob")
    assert get_friends(people, "alice") == []
    with pytest.raises(NotFoundError):
        delete_friend(people, "alice", "bob")