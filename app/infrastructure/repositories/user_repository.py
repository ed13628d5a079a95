"""Repository for the user contact records this service reads."""

import sqlite3
from typing import Optional

from app.domain.models.user import User
from app.infrastructure.persistence.sqlite import SQLiteDatabase, decode_timestamp, encode_value, utc_now


class UserRepository:
    """Repository for User contact records in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self.database = database

    def upsert(
        self,
        user_id: str,
        email: Optional[str],
        first_name: str,
        last_name: str,
    ) -> User:
        """Insert or refresh a user's contact details."""
        now = utc_now()
        with self.database.transaction() as conn:
            conn.execute(
                """
                INSERT INTO users (id, email, first_name, last_name, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email = excluded.email,
                    first_name = excluded.first_name,
                    last_name = excluded.last_name
                """,
                (user_id, email, first_name, last_name, encode_value(now)),
            )
        return User(id=user_id, email=email, first_name=first_name, last_name=last_name, created_at=now)

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        with self.database.reading() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

        if not row:
            return None

        return self._row_to_user(row)

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            created_at=decode_timestamp(row["created_at"]),
        )
