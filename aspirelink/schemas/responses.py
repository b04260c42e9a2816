from pydantic import BaseModel

from aspirelink.core.roles import Role
from aspirelink.schemas.records import (
    AssignmentRecord,
    CohortMemberRecord,
    CohortRecord,
    MentorRegistrationRecord,
    MentoringSessionRecord,
    StudentRegistrationRecord,
    UserRecord,
)

UNKNOWN_MENTOR = 'Unknown Mentor'
UNKNOWN_STUDENT = 'Unknown Student'
UNKNOWN_COHORT = 'Unknown Cohort'


class EmailRegistrationStatus(BaseModel):
    exists: bool
    type: Role | None = None
    message: str | None = None


class RegistrationCreatedResponse(BaseModel):
    success: bool = True
    id: int


class SeedAdminResponse(BaseModel):
    message: str
    admin_id: int
    email: str


class EnrichedAssignment(AssignmentRecord):
    """An assignment as seen from one side of the pairing."""

    counterpart: MentorRegistrationRecord | StudentRegistrationRecord | None = None
    counterpart_name: str
    cohort: CohortRecord | None = None
    sessions: list[MentoringSessionRecord] = []


class NamedAssignment(AssignmentRecord):
    mentor_name: str
    student_name: str
    cohort_name: str | None = None


class EnrichedCohortMember(CohortMemberRecord):
    user: UserRecord | None = None
    registration: MentorRegistrationRecord | StudentRegistrationRecord | None = None


class AdminStats(BaseModel):
    total_students: int
    total_mentors: int
    active_students: int
    active_mentors: int
    total_assignments: int
    total_cohorts: int
    active_cohorts: int


class BulkDeleteResponse(BaseModel):
    success: bool = True
    deleted_count: int
    message: str
