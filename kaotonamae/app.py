"""HTTP interface: routes over the account, group, friend and quiz stores."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Iterable, Sequence
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kaotonamae import quiz, social, users
from kaotonamae.db import create_engine_from_env, migrate, session_factory
from kaotonamae.models import StoreError

_BIND_FAILED = "リクエストボディのバインドに失敗しました。"
_DONE = "status: 完了"
_CORS_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"

_GROUP_TEXT_KEYS = ("userId", "groupId", "groupName", "overview", "updatedAt", "createdAt")
_USER_INFO_TEXT_KEYS = (
    "userId",
    "userLastName",
    "userFirstName",
    "lastNameFurigana",
    "firstNameFurigana",
    "nickname",
    "gender",
    "photo",
    "birthday",
    "age",
    "hobbys",
    "organization",
    "favoriteColor",
    "favoriteAnimal",
    "favoritePlace",
    "holidayActivity",
    "weaknesses",
    "language",
    "updatedAt",
    "createdAt",
)


def _dicts(items: Iterable[Any]) -> list[dict[str, Any]]:
    return [item.to_dict() for item in items]


def _dicts_or_null(items: Iterable[Any]) -> list[dict[str, Any]] | None:
    return _dicts(items) or None


def _bind(text_keys: Sequence[str]) -> dict[str, Any] | None:
    """The JSON request body as a dict, {} when empty, None when it cannot be bound."""
    raw = request.get_data()
    if not raw:
        return {}
    if not request.is_json:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if data is None:
        return {}
    if not isinstance(data, dict):
        return None
    for key in text_keys:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            return None
    return data


def create_app(sessions: Callable[[], Session]) -> Flask:
    """Build the application; each request runs in a fresh session from sessions()."""
    app = Flask(__name__)
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    def reply(payload: Any, status: HTTPStatus = HTTPStatus.OK) -> Response:
        response = app.json.response(payload)
        response.status_code = status
        return response

    def run(
        operation: Callable[[Session], Any],
        failure: str,
        render: Callable[[Any], Any] | None = None,
    ) -> Response:
        """Run operation in a session; without render, success answers with the done status."""
        with sessions() as session:
            try:
                result = operation(session)
            except StoreError:
                return reply(failure, HTTPStatus.INTERNAL_SERVER_ERROR)
            if render is None:
                return reply(_DONE)
            return reply(render(result))

    def as_dict(item: Any) -> Any:
        return item.to_dict()

    @app.before_request
    def _preflight() -> Response | None:
        if request.method != "OPTIONS":
            return None
        response = app.response_class(status=HTTPStatus.NO_CONTENT)
        if request.headers.get("Origin"):
            response.headers["Access-Control-Allow-Methods"] = _CORS_METHODS
            requested = request.headers.get("Access-Control-Request-Headers")
            if requested:
                response.headers["Access-Control-Allow-Headers"] = requested
        return response

    @app.after_request
    def _cors(response: Response) -> Response:
        response.headers.add("Vary", "Origin")
        if request.headers.get("Origin"):
            response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    # Users

    @app.get("/users")
    def get_all_users() -> Response:
        return run(users.get_all_users, "ユーザーを取得できませんでした。", _dicts)

    @app.post("/createUser/<user_id>")
    def create_user(user_id: str) -> Response:
        return run(
            lambda session: users.create_user(session, user_id),
            "ユーザーを追加できませんでした。",
            as_dict,
        )

    # Auths

    @app.get("/auths")
    def get_all_auths() -> Response:
        return run(users.get_all_auths, "認証情報を取得できませんでした。", _dicts)

    @app.post("/auths/<user_id>/<email>/<password>")
    def create_auth(user_id: str, email: str, password: str) -> Response:
        return run(
            lambda session: users.create_auth(session, user_id, email, password),
            "認証情報を追加できませんでした。",
            as_dict,
        )

    # Groups

    @app.get("/groups")
    def get_all_groups() -> Response:
        return run(social.get_all_groups, "グループを取得できませんでした。", _dicts)

    @app.get("/groups/<user_id>")
    def get_groups_by_user(user_id: str) -> Response:
        return run(
            lambda session: social.get_groups_by_user(session, user_id),
            "グループを取得できませんでした。",
            _dicts_or_null,
        )

    @app.get("/group/<group_id>")
    def get_group(group_id: str) -> Response:
        return run(
            lambda session: social.get_group(session, group_id),
            "グループメンバーを取得できませんでした。",
            as_dict,
        )

    @app.post("/newGroup/<user_id>")
    def create_group(user_id: str) -> Response:
        return run(
            lambda session: social.create_group(session, user_id),
            "グループを追加できませんでした。",
            as_dict,
        )

    @app.put("/group")
    def update_group() -> Response:
        data = _bind(_GROUP_TEXT_KEYS)
        if data is None:
            return reply(_BIND_FAILED, HTTPStatus.BAD_REQUEST)
        if not data.get("groupId"):
            return reply("group_id が指定されていません。", HTTPStatus.BAD_REQUEST)
        return run(
            lambda session: social.update_group(session, data),
            "グループを更新できませんでした。",
            as_dict,
        )

    # Group members

    @app.get("/groupMembers")
    def get_all_group_members() -> Response:
        return run(
            social.get_all_group_members,
            "グループメンバー取得できませんでした。",
            _dicts,
        )

    @app.get("/groupMembers/<group_id>")
    def get_group_members(group_id: str) -> Response:
        return run(
            lambda session: social.get_group_members(session, group_id),
            "グループメンバーを取得できませんでした。",
            _dicts,
        )

    @app.post("/groupMemberAdd/<group_id>/<user_id>")
    def add_group_member(group_id: str, user_id: str) -> Response:
        return run(
            lambda session: social.add_group_member(session, user_id, group_id),
            "グループメンバーを取得できませんでした。",
            as_dict,
        )

    @app.delete("/groupMemberDelete/<group_id>/<user_id>")
    def delete_group_member(group_id: str, user_id: str) -> Response:
        return run(
            lambda session: social.delete_group_member(session, user_id, group_id),
            "グループメンバーを取得できませんでした。",
        )

    # Friends

    @app.get("/friends")
    def get_all_friends() -> Response:
        return run(social.get_all_friends, "フレンドを取得できませんでした。", _dicts)

    @app.get("/friends/<user_id>")
    def get_friends(user_id: str) -> Response:
        return run(
            lambda session: social.get_friends(session, user_id),
            "フレンドを取得できませんでした。",
            _dicts,
        )

    @app.post("/friendAdd/<my_user_id>/<friend_user_id>")
    def add_friend(my_user_id: str, friend_user_id: str) -> Response:
        return run(
            lambda session: social.add_friend(session, my_user_id, friend_user_id),
            "フレンドを追加できませんでした。",
            as_dict,
        )

    @app.delete("/friendDelete/<my_user_id>/<friend_user_id>")
    def delete_friend(my_user_id: str, friend_user_id: str) -> Response:
        return run(
            lambda session: social.delete_friend(session, my_user_id, friend_user_id),
            "フレンドを削除できませんでした。",
        )

    # Profiles

    @app.get("/userInfos")
    def get_all_user_infos() -> Response:
        return run(
            users.get_all_user_infos, "ユーザー情報を取得できませんでした。", _dicts
        )

    @app.get("/userInfo/<user_id>")
    def get_user_info(user_id: str) -> Response:
        return run(
            lambda session: users.get_user_info(session, user_id),
            "ユーザー情報を取得できませんでした。",
            as_dict,
        )

    @app.post("/createUserInfo/<user_id>")
    def create_user_info(user_id: str) -> Response:
        return run(
            lambda session: users.create_user_info(session, user_id),
            "ユーザー情報を追加できませんでした。",
            as_dict,
        )

    @app.put("/userInfo")
    def update_user_info() -> Response:
        data = _bind(_USER_INFO_TEXT_KEYS)
        if data is None:
            return reply(_BIND_FAILED, HTTPStatus.BAD_REQUEST)
        if not data.get("userId"):
            return reply("user_id が指定されていません。", HTTPStatus.BAD_REQUEST)
        return run(
            lambda session: users.update_user_info(session, data),
            "ユーザー情報を更新できませんでした。",
            as_dict,
        )

    # Quiz

    @app.get("/quiz/<group_id>")
    def get_quiz(group_id: str) -> Response:
        return run(
            lambda session: quiz.create_quizzes(session, group_id),
            "ユーザーを取得できませんでした。",
            _dicts_or_null,
        )

    return app


def main(argv: Sequence[str] | None = None) -> int:
    """Connect to the database, create the tables and serve HTTP."""
    parser = argparse.ArgumentParser(
        prog="kaotonamae", description="Serve the face-and-name quiz API."
    )
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    args = parser.parse_args(argv)

    try:
        engine = create_engine_from_env()
        migrate(engine)
    except (StoreError, SQLAlchemyError) as exc:
        print(exc, file=sys.stderr)
        return 1

    app = create_app(session_factory(engine))
    app.run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())