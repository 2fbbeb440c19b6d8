"""User records and their repository."""

from __future__ import annotations

from dataclasses import dataclass, replace

from spine_sql.errors import IntegrityError
from spine_sql.keys import KeyCollector, first_key
from spine_sql.repository import BaseRepository
from spine_sql.rows import ResultRow

_COLUMNS = "id, account, password, email"


@dataclass(frozen=True)
class User:
    id: int | None
    account: str
    password: str
    email: str

    @classmethod
    def new(cls, account: str, password: str, email: str) -> User:
        return cls(None, account, password, email)

    def with_id(self, user_id: int) -> User:
        return replace(self, id=user_id)


def map_user(row: ResultRow) -> User:
    return User(
        id=row.get_int(1),
        account=row.get_str(2),
        password=row.get_str(3),
        email=row.get_str(4),
    )


class UserRepository(BaseRepository):
    """CRUD for the ``users`` table."""

    def create_table(self) -> None:
        # DDL for SQLite only; PostgreSQL deployments manage their schema elsewhere.
        self.jdbc.execute_update(
            "create table if not exists users ("
            " id integer primary key autoincrement,"
            " account varchar(100) not null,"
            " password varchar(100) not null,"
            " email varchar(100) not null)"
        )

    def insert(self, user: User) -> int:
        """Insert ``user`` and return its generated id."""
        keys: KeyCollector[int] = KeyCollector("id")
        self.jdbc.execute_update_with_collector(
            f"insert into users (account, password, email) values ({self.ph(3)})",
            keys,
            user.account,
            user.password,
            user.email,
        )
        user_id = first_key(keys)
        if user_id is None:
            raise IntegrityError(f"insert of account {user.account!r} generated no id")
        return user_id

    def update(self, user: User) -> None:
        if user.id is None:
            raise ValueError("cannot update a user without an id")
        ph = self.dialect.placeholder
        self.jdbc.execute_update(
            f"update users set account = {ph(1)}, password = {ph(2)}, email = {ph(3)}"
            f" where id = {ph(4)}",
            user.account,
            user.password,
            user.email,
            user.id,
        )

    def find_all(self) -> list[User]:
        return self.jdbc.query_for_list(f"select {_COLUMNS} from users order by id", map_user)

    def find_by_id(self, user_id: int) -> User | None:
        return self.jdbc.query_for_object(
            f"select {_COLUMNS} from users where id = {self.ph(1)}", map_user, user_id
        )

    def find_by_account(self, account: str) -> User | None:
        return self.jdbc.query_for_object(
            f"select {_COLUMNS} from users where account = {self.ph(1)}", map_user, account
        )

    def delete_all(self) -> None:
        self.jdbc.execute_update("delete from users")


__all__ = [
    "User",
    "UserRepository",
    "map_user",
]
