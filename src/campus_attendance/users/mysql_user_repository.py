from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import FacultyProfile, InternProfile, ProfileView, RoleProfile, StudentProfile, User
from .repository import UserRepository, UserWriteTransaction

_USER_COLUMNS = "user_id, first_name, last_name, email, password_hash, role, dob, created_at"


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        date_of_birth=row["dob"],
        created_at=row.get("created_at"),
    )


class MySQLUserWriteTransaction(UserWriteTransaction):
    """Issues writes on a cursor owned by an open ``db_cursor`` block."""

    def __init__(self, cur):
        self._cur = cur

    def insert_user(self, user: User) -> None:
        self._cur.execute(
            """
            INSERT INTO users(user_id, first_name, last_name, email, password_hash, role, dob)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                user.user_id,
                user.first_name,
                user.last_name,
                user.email,
                user.password_hash,
                user.role.value,
                user.date_of_birth,
            ),
        )

    def insert_profile(self, profile: RoleProfile) -> None:
        if isinstance(profile, StudentProfile):
            self._cur.execute(
                "INSERT INTO students(student_id, major_id, year_of_study) VALUES(%s,%s,%s)",
                (profile.user_id, profile.major_id, profile.year_of_study),
            )
        elif isinstance(profile, FacultyProfile):
            self._cur.execute(
                "INSERT INTO faculty(faculty_id, department_id, designation) VALUES(%s,%s,%s)",
                (profile.user_id, profile.department_id, profile.designation),
            )
        elif isinstance(profile, InternProfile):
            self._cur.execute(
                "INSERT INTO interns(intern_id, assigned_department, start_date, end_date) VALUES(%s,%s,%s,%s)",
                (profile.user_id, profile.assigned_department, profile.start_date, profile.end_date),
            )
        else:
            raise TypeError(f"Unsupported profile type: {type(profile)!r}")

    def update_user(self, user: User) -> None:
        self._cur.execute(
            "UPDATE users SET first_name=%s, last_name=%s, email=%s, dob=%s WHERE user_id=%s",
            (user.first_name, user.last_name, user.email, user.date_of_birth, user.user_id),
        )

    def update_profile(self, profile: RoleProfile) -> None:
        if isinstance(profile, StudentProfile):
            self._cur.execute(
                "UPDATE students SET major_id=%s, year_of_study=%s WHERE student_id=%s",
                (profile.major_id, profile.year_of_study, profile.user_id),
            )
        elif isinstance(profile, FacultyProfile):
            self._cur.execute(
                "UPDATE faculty SET department_id=%s, designation=%s WHERE faculty_id=%s",
                (profile.department_id, profile.designation, profile.user_id),
            )
        elif isinstance(profile, InternProfile):
            self._cur.execute(
                "UPDATE interns SET assigned_department=%s, start_date=%s, end_date=%s WHERE intern_id=%s",
                (profile.assigned_department, profile.start_date, profile.end_date, profile.user_id),
            )
        else:
            raise TypeError(f"Unsupported profile type: {type(profile)!r}")


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def email_exists(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS hit FROM users WHERE email=%s LIMIT 1", (email,))
            return fetchone(cur) is not None

    def user_id_exists(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS hit FROM users WHERE user_id=%s LIMIT 1", (user_id,))
            return fetchone(cur) is not None

    def get_profile_view(self, user_id: int) -> Optional[ProfileView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            if not row:
                return None
            user = _row_to_user(row)

            if user.role == Role.STUDENT:
                cur.execute(
                    """
                    SELECT s.major_id, s.year_of_study, m.major_name
                    FROM students s
                    LEFT JOIN majors m ON m.major_id = s.major_id
                    WHERE s.student_id=%s
                    """,
                    (user_id,),
                )
                r = fetchone(cur)
                if not r:
                    return ProfileView(user=user, profile=None)
                return ProfileView(
                    user=user,
                    profile=StudentProfile(user_id, int(r["major_id"]), int(r["year_of_study"])),
                    major_name=r.get("major_name"),
                )

            if user.role == Role.FACULTY:
                cur.execute(
                    """
                    SELECT f.department_id, f.designation, d.department_name
                    FROM faculty f
                    LEFT JOIN departments d ON d.department_id = f.department_id
                    WHERE f.faculty_id=%s
                    """,
                    (user_id,),
                )
                r = fetchone(cur)
                if not r:
                    return ProfileView(user=user, profile=None)
                return ProfileView(
                    user=user,
                    profile=FacultyProfile(user_id, int(r["department_id"]), r["designation"]),
                    department_name=r.get("department_name"),
                )

            cur.execute(
                """
                SELECT i.assigned_department, i.start_date, i.end_date, d.department_name
                FROM interns i
                LEFT JOIN departments d ON d.department_id = i.assigned_department
                WHERE i.intern_id=%s
                """,
                (user_id,),
            )
            r = fetchone(cur)
            if not r:
                return ProfileView(user=user, profile=None)
            return ProfileView(
                user=user,
                profile=InternProfile(user_id, int(r["assigned_department"]), r["start_date"], r["end_date"]),
                department_name=r.get("department_name"),
            )

    @contextmanager
    def transaction(self) -> Iterator[UserWriteTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield MySQLUserWriteTransaction(cur)
