import pytest
from sqlalchemy import create_engine

from kaotonamae.db import migrate, session_factory
from kaotonamae.models import NotFoundError, StoreError
from kaotonamae.users import (
    DEFAULT_FIRST_NAME,
    DEFAULT_LAST_NAME,
    create_auth,
    create_user,
    create_user_info,
    get_all_auths,
    get_all_user_infos,
    get_all_users,
    get_user_info,
    update_user_info,
)


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    migrate(engine)
    with session_factory(engine)() as db_session:
        yield db_session
    engine.dispose()


def test_create_user_also_creates_default_profile(session):
    user = create_user(session, "u1")
    assert user.user_id == "u1"
    info = get_user_info(session, "u1")
    assert info.user_last_name == DEFAULT_LAST_NAME
    assert info.user_first_name == DEFAULT_FIRST_NAME
    assert info.full_name() == f"{DEFAULT_LAST_NAME} {DEFAULT_FIRST_NAME}"


def test_get_all_users_lists_created_users(session):
    create_user(session, "a")
    create_user(session, "b")
    assert sorted(u.user_id for u in get_all_users(session)) == ["a", "b"]
    assert sorted(i.user_id for i in get_all_user_infos(session)) == ["a", "b"]


def test_empty_store_lists_nothing(session):
    assert get_all_users(session) == []
    assert get_all_auths(session) == []


def test_duplicate_user_raises_store_error(session):
    create_user(session, "dup")
    with pytest.raises(StoreError):
        create_user(session, "dup")
    assert [u.user_id for u in get_all_users(session)] == ["dup"]


def test_duplicate_user_info_raises_store_error(session):
    create_user_info(session, "x")
    with pytest.raises(StoreError):
        create_user_info(session, "x")


def test_missing_profile_raises_not_found(session):
    with pytest.raises(NotFoundError):
        get_user_info(session, "nobody")


def test_update_user_info_overwrites_fields_but_not_age(session):
    info = create_user_info(session, "u2")
    info.age = "30"
    session.commit()
    before = info.updated_at

    updated = update_user_info(
        session,
        {
            "userId": "u2",
            "userLastName": "Yamada",
            "userFirstName": "Taro",
            "nickname": "Taro-kun",
            "age": "99",
            "language": "Japanese",
        },
    )
    assert updated.full_name() == "Yamada Taro"
    assert updated.nickname == "Taro-kun"
    assert updated.language == "Japanese"
    assert updated.age == "30"
    assert updated.gender == ""
    assert updated.updated_at >= before

    reread = get_user_info(session, "u2")
    assert reread.to_dict()["userLastName"] == "Yamada"


def test_update_missing_user_info_raises_not_found(session):
    with pytest.raises(NotFoundError):
        update_user_info(session, {"userId": "ghost", "userLastName": "X"})


def test_create_auth_round_trip(session):
    password = "password"
    auth = create_auth(session, "u3", "someone@example.com", password)
    stored = get_all_auths(session)
    assert [a.user_id for a in stored] == ["u3"]
    data = auth.to_dict()
    assert data["email"] == "someone@example.com"
    assert data["password"] == password


def test_duplicate_auth_raises_store_error(session):
    password = "password"
    create_auth(session, "u4", "a@example.com", password)
    with pytest.raises(StoreError):
        create_auth(session, "u4", "b@example.com", password)
    assert [a.email for a in get_all_auths(session)] == ["a@example.com"]