# kaotonamae

A small HTTP backend for a "face and name" quiz app. It stores users, their
profiles, authentication records, groups, group members and friends in a
SQL database through SQLAlchemy, and builds quizzes that ask about the
members of a group: their names, nicknames, hobbies, favourite colours and
so on.

## Installation

```
pip install .
```

The server connects to MySQL through the `mysql+pymysql` SQLAlchemy driver,
which is not installed with the package. Install PyMySQL next to it before
running the server:

```
pip install pymysql
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration

The database connection is read from the environment by
`kaotonamae.db.database_url`:

| Variable      | Meaning            |
|---------------|--------------------|
| `DB_USER`     | database user      |
| `DB_PASSWORD` | database password  |
| `DB_HOST`     | database host      |
| `DB_PORT`     | database port      |
| `DB_NAME`     | database name      |

The connection uses the `utf8mb4` character set. A `DB_PORT` that is not a
number is rejected.

## Running the server

```
kaotonamae
```

On start the command connects to the database, creates any tables that do
not exist yet and serves HTTP with Flask's built-in server. Options:

- `--host` – address to listen on (default `0.0.0.0`)
- `--port` – port to listen on (default `8080`)

If the database cannot be reached, the command prints
`Could not connect to database.` to standard error and exits with status 1.

Every response carries `Access-Control-Allow-Origin: *` when the request has
an `Origin` header, and `OPTIONS` preflight requests are answered with
status 204.

## Endpoints

| Method | Path                                        | Purpose                              |
|--------|---------------------------------------------|--------------------------------------|
| GET    | `/users`                                    | all users                            |
| POST   | `/createUser/<userId>`                      | create a user and a blank profile    |
| GET    | `/auths`                                    | all authentication records           |
| POST   | `/auths/<userId>/<email>/<password>`        | add an authentication record         |
| GET    | `/groups`                                   | all groups                           |
| GET    | `/groups/<userId>`                          | ids and names of a user's groups     |
| GET    | `/group/<groupId>`                          | one group                            |
| POST   | `/newGroup/<userId>`                        | create a group named "New Group #n"  |
| PUT    | `/group`                                    | update a group's name and overview   |
| GET    | `/groupMembers`                             | all group members                    |
| GET    | `/groupMembers/<groupId>`                   | members of one group                 |
| POST   | `/groupMemberAdd/<groupId>/<userId>`        | add a user to a group                |
| DELETE | `/groupMemberDelete/<groupId>/<userId>`     | remove a user from a group           |
| GET    | `/friends`                                  | all friend records                   |
| GET    | `/friends/<userId>`                         | a user's friends                     |
| POST   | `/friendAdd/<myUserId>/<friendUserId>`      | add a friend                         |
| DELETE | `/friendDelete/<myUserId>/<friendUserId>`   | remove a friend                      |
| GET    | `/userInfos`                                | all profiles                         |
| GET    | `/userInfo/<userId>`                        | one profile                          |
| POST   | `/createUserInfo/<userId>`                  | create a blank profile               |
| PUT    | `/userInfo`                                 | update a profile                     |
| GET    | `/quiz/<groupId>`                           | up to 15 quiz questions for a group  |

Responses are JSON with camel-case field names, for example `userId`,
`groupName` and `quizQuestionTop`. `/groups/<userId>` and `/quiz/<groupId>`
answer `null` instead of an empty list. Deletions answer `"status: 完了"`.

When an operation fails the server answers with status 500 and a short
message. A `PUT` whose body is not a JSON object with string fields, or that
lacks `groupId` / `userId`, is answered with status 400.

A new group gets a random UUID and the first name of the form
`New Group #1`, `New Group #2`, … that the user does not already use. A new
profile gets the placeholder names `User Last Name` and `User First Name`.
Updating a profile overwrites every field except `age`; fields left out of
the body become empty.

## Using it as a library

- `kaotonamae.db` – `database_url`, `create_engine_from_env`, `migrate`
  (creates the tables) and `session_factory`.
- `kaotonamae.models` – the SQLAlchemy tables `User`, `Auth`, `UserInfo`,
  `Group`, `GroupMember`, `Friend`, the `GroupListElement` summary, and the
  errors `StoreError` and `NotFoundError`. Every record has `to_dict()`.
- `kaotonamae.users` – users, profiles and authentication records
  (`create_user`, `get_user_info`, `update_user_info`, `create_auth`, …).
- `kaotonamae.social` – groups, members and friends (`create_group`,
  `next_available_group_name`, `add_group_member`, `add_friend`, …).
- `kaotonamae.quiz` – `create_quizzes(session, group_id, rng=None)` returns
  `Quiz` objects; pass a `random.Random` to make the choice repeatable.
- `kaotonamae.app` – `create_app(sessions)` builds the Flask application
  around a session factory; `main(argv=None)` is the command above.

```python
from sqlalchemy import create_engine
from kaotonamae.app import create_app
from kaotonamae.db import migrate, session_factory

engine = create_engine("sqlite://")
migrate(engine)
app = create_app(session_factory(engine))
```

## What it does not do

There is no login or access control: authentication records are stored and
listed as given, passwords included, and every endpoint is open to any
client. The bundled command uses Flask's development server; for production
run the application from `create_app` under a WSGI server of your choice.