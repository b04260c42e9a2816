"""Closed sets of user roles and session statuses."""

from enum import Enum


class Role(str, Enum):
    """Role of an identity. An identity with no role is stored as NULL."""

    STUDENT = "student"
    MENTOR = "mentor"
    ADMIN = "admin"


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


MEMBER_ROLES = (Role.STUDENT, Role.MENTOR)


def counterpart_of(role: Role) -> Role:
    if role is Role.MENTOR:
        return Role.STUDENT
    if role is Role.STUDENT:
        return Role.MENTOR
    raise ValueError(f"Role {role.value!r} has no mentorship counterpart.")
