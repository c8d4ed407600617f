"""Quizzes about the members of a group, built from their profiles."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from kaotonamae.models import GroupMember, NotFoundError, StoreError, UserInfo
from kaotonamae.social import get_group_members
from kaotonamae.users import get_user_info

MAX_QUIZZES = 15

_NAME_FIELD = "UserName"
_NAME_QUESTION_TOP = "写真の人の"
_NAME_QUESTION_BOTTOM = "お名前は何でしょう"
_DEFAULT_STATE = "Default state"
_STOP_CHANCE = 0.25
_HINT_LIMIT = 3
_NO_MEMBERS = "グループメンバーが見つかりません"

# Profile fields a quiz can ask about, as (field name, attribute).
_PROFILE_FIELDS = (
    ("Nickname", "nickname"),
    ("Gender", "gender"),
    ("Birthday", "birthday"),
    ("Age", "age"),
    ("Hobbys", "hobbys"),
    ("Organization", "organization"),
    ("FavoriteColor", "favorite_color"),
    ("FavoriteAnimal", "favorite_animal"),
    ("FavoritePlace", "favorite_place"),
    ("HolidayActivity", "holiday_activity"),
    ("Weaknesses", "weaknesses"),
    ("Language", "language"),
)

_HINT_PREFIXES = {
    "Nickname": "あだ名は ",
    "Gender": "性別は ",
    "Birthday": "お誕生日は ",
    "Age": "年齢は ",
    "Hobbys": "趣味は ",
    "Organization": "所属は ",
    "FavoriteColor": "好きな色は ",
    "FavoriteAnimal": "好きな動物は ",
    "FavoritePlace": "好きな場所は ",
    "HolidayActivity": "休日の過ごし方は ",
    "Weaknesses": "弱点は ",
    "Language": "使う言語は ",
}

_QUESTIONS = {
    "Nickname": "あだ名は何でしょう",
    "Gender": "性別は何でしょう",
    "Birthday": "お誕生日はいつでしょう",
    "Age": "年齢はおいくつでしょう",
    "Hobbys": "趣味は何でしょう",
    "Organization": "所属は何でしょう",
    "FavoriteColor": "好きな色は何色でしょう",
    "FavoriteAnimal": "好きな動物は何でしょう",
    "FavoritePlace": "好きな場所は何処でしょう",
    "HolidayActivity": "休日の過ごし方は何でしょう",
    "Weaknesses": "弱点は何でしょう",
    "Language": "使う言語は何でしょう",
}


@dataclass
class Quiz:
    """One question about a member, with up to three hints."""

    question_top: str
    question_bottom: str
    answer: str
    hint: dict[str, str] = field(default_factory=dict)
    user_photo: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "quizQuestionTop": self.question_top,
            "quizQuestionBottom": self.question_bottom,
            "quizAnswer": self.answer,
            "quizHint": dict(self.hint),
            "userPhoto": self.user_photo,
        }


def hint_prefix(field: str) -> str:
    """The opening words of a hint about the given profile field."""
    return _HINT_PREFIXES.get(field, _DEFAULT_STATE)


def question_text(field: str) -> str:
    """The question asked about the given profile field."""
    return _QUESTIONS.get(field, _DEFAULT_STATE)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _profile_fields(info: UserInfo) -> dict[str, str]:
    fields = {_NAME_FIELD: info.full_name()}
    for name, attribute in _PROFILE_FIELDS:
        fields[name] = _text(getattr(info, attribute))
    return fields


def _hints(fields: dict[str, str], order: list[str]) -> dict[str, str]:
    hinted = [name for name in order if name != _NAME_FIELD][:_HINT_LIMIT]
    return {
        f"Hint{number}": f"{hint_prefix(name)}{fields[name]}です。"
        for number, name in enumerate(hinted, start=1)
    }


def _pick_member(
    members: list[GroupMember], done: set[str], rng: random.Random
) -> GroupMember | None:
    """A random member not yet quizzed; None after as many misses as members."""
    misses = 0
    while misses < len(members):
        member = rng.choice(members)
        if member.user_id not in done:
            return member
        misses += 1
    return None


def create_quizzes(
    session: Session, group_id: str, rng: random.Random | None = None
) -> list[Quiz]:
    """Up to fifteen quizzes about randomly chosen members of a group."""
    rng = rng if rng is not None else random.Random()
    try:
        members = get_group_members(session, group_id)
    except StoreError as exc:
        raise NotFoundError(_NO_MEMBERS) from exc
    if not members:
        raise NotFoundError(_NO_MEMBERS)

    quizzes: list[Quiz] = []
    asked: set[str] = set()
    done: set[str] = set()

    while len(quizzes) < MAX_QUIZZES:
        member = _pick_member(members, done, rng)
        if member is None:
            break
        done.add(member.user_id)
        try:
            info = get_user_info(session, member.user_id)
        except NotFoundError:
            continue

        fields = _profile_fields(info)
        valid = [name for name, value in fields.items() if value]
        rng.shuffle(valid)
        name = fields[_NAME_FIELD]
        if not valid or name in asked:
            continue

        photo = _text(info.photo)
        hints = _hints(fields, valid)
        quizzes.append(
            Quiz(_NAME_QUESTION_TOP, _NAME_QUESTION_BOTTOM, name, dict(hints), photo)
        )
        asked.add(name)

        while len(quizzes) < MAX_QUIZZES:
            remaining = [
                candidate
                for candidate in valid
                if candidate != _NAME_FIELD and fields[candidate] not in asked
            ]
            if not remaining:
                break
            chosen = rng.choice(remaining)
            answer = fields[chosen]
            quizzes.append(
                Quiz(f"{name} さんの", question_text(chosen), answer, dict(hints), photo)
            )
            asked.add(answer)
            if rng.random() < _STOP_CHANCE:
                break

    return quizzes