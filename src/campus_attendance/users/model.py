from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Identity root. Plain data, no DB access."""

    user_id: int
    first_name: str
    last_name: str
    email: str
    password_hash: str
    role: Role
    date_of_birth: date
    created_at: Optional[datetime] = None

    @property
    def username(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class StudentProfile:
    user_id: int
    major_id: int
    year_of_study: int


@dataclass(frozen=True)
class FacultyProfile:
    user_id: int
    department_id: int
    designation: str


@dataclass(frozen=True)
class InternProfile:
    user_id: int
    assigned_department: int
    start_date: date
    end_date: date


RoleProfile = Union[StudentProfile, FacultyProfile, InternProfile]


@dataclass(frozen=True)
class ProfileView:
    """Read-model for the dashboards: user, its role row and lookup names."""

    user: User
    profile: Optional[RoleProfile]
    major_name: Optional[str] = None
    department_name: Optional[str] = None

    def as_dict(self) -> dict:
        out = {
            "user_id": self.user.user_id,
            "first_name": self.user.first_name,
            "last_name": self.user.last_name,
            "email": self.user.email,
            "dob": self.user.date_of_birth.isoformat(),
            "role": self.user.role.value,
        }
        if isinstance(self.profile, StudentProfile):
            out.update(major_id=self.profile.major_id, year_of_study=self.profile.year_of_study, major_name=self.major_name)
        elif isinstance(self.profile, FacultyProfile):
            out.update(
                department_id=self.profile.department_id,
                designation=self.profile.designation,
                department_name=self.department_name,
            )
        elif isinstance(self.profile, InternProfile):
            out.update(
                assigned_department=self.profile.assigned_department,
                start_date=self.profile.start_date.isoformat(),
                end_date=self.profile.end_date.isoformat(),
                department_name=self.department_name,
            )
        return out
