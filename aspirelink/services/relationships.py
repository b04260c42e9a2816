"""Denormalised views over cohorts, assignments and sessions.

Every lookup is by foreign key. A dangling reference never fails the read:
a missing registration or cohort comes back as ``None`` with an
``Unknown ...`` name in its place.
"""

import logging

from aspirelink.core.errors import NotFoundError
from aspirelink.core.roles import Role, counterpart_of
from aspirelink.schemas.records import AssignmentRecord, CohortRecord, RegistrationRecord
from aspirelink.schemas.responses import (
    UNKNOWN_COHORT,
    UNKNOWN_MENTOR,
    UNKNOWN_STUDENT,
    EnrichedAssignment,
    EnrichedCohortMember,
    NamedAssignment,
)
from aspirelink.storage.base import Storage

logger = logging.getLogger(__name__)


def _assignments_for_mentor(storage: Storage, user_id: str) -> list[AssignmentRecord]:
    assignments = storage.list_assignments_by_mentor_user(user_id)
    registration = storage.get_mentor_by_user_id(user_id)
    if registration is not None:
        assignments += storage.list_assignments_by_mentor(registration.id)
    return assignments


def _assignments_for_student(storage: Storage, user_id: str) -> list[AssignmentRecord]:
    assignments = storage.list_assignments_by_student_user(user_id)
    registration = storage.get_student_by_user_id(user_id)
    if registration is not None:
        assignments += storage.list_assignments_by_student(registration.id)
    return assignments


def _unique_by_id(assignments: list[AssignmentRecord]) -> list[AssignmentRecord]:
    seen: set[int] = set()
    unique: list[AssignmentRecord] = []
    for assignment in assignments:
        if assignment.id not in seen:
            seen.add(assignment.id)
            unique.append(assignment)
    return unique


def _counterpart(
    storage: Storage,
    assignment: AssignmentRecord,
    perspective: Role,
) -> tuple[RegistrationRecord | None, str]:
    if counterpart_of(perspective) is Role.STUDENT:
        student = storage.get_student_registration(assignment.student_id)
        return student, student.full_name if student is not None else UNKNOWN_STUDENT

    mentor = storage.get_mentor_registration(assignment.mentor_id)
    return mentor, mentor.full_name if mentor is not None else UNKNOWN_MENTOR


def list_assignments_for_user(storage: Storage, user_id: str, perspective: Role) -> list[EnrichedAssignment]:
    """Assignments where ``user_id`` is the mentor or the student.

    An assignment matches either through the user id copied onto it when it
    was created or through the registration now linked to the user.
    """
    if perspective is Role.MENTOR:
        assignments = _assignments_for_mentor(storage, user_id)
    elif perspective is Role.STUDENT:
        assignments = _assignments_for_student(storage, user_id)
    else:
        raise ValueError(f'Assignments cannot be viewed as {perspective.value!r}.')

    enriched: list[EnrichedAssignment] = []
    for assignment in sorted(_unique_by_id(assignments), key=lambda item: item.id):
        counterpart, counterpart_name = _counterpart(storage, assignment, perspective)
        cohort = storage.get_cohort(assignment.cohort_id) if assignment.cohort_id is not None else None
        if counterpart is None or (assignment.cohort_id is not None and cohort is None):
            logger.warning('Assignment %s has dangling references', assignment.id)

        enriched.append(
            EnrichedAssignment(
                **assignment.model_dump(),
                counterpart=counterpart,
                counterpart_name=counterpart_name,
                cohort=cohort,
                sessions=storage.list_sessions_by_assignment(assignment.id),
            )
        )
    return enriched


def list_cohorts_for_user(storage: Storage, user_id: str) -> list[CohortRecord]:
    cohorts: list[CohortRecord] = []
    seen: set[int] = set()
    for membership in storage.list_memberships_for_user(user_id):
        if membership.cohort_id in seen:
            continue
        seen.add(membership.cohort_id)

        cohort = storage.get_cohort(membership.cohort_id)
        if cohort is not None:
            cohorts.append(cohort)
    return cohorts


def list_cohort_members(storage: Storage, cohort_id: int) -> list[EnrichedCohortMember]:
    enriched: list[EnrichedCohortMember] = []
    for member in storage.list_cohort_members(cohort_id):
        if member.role is Role.MENTOR:
            registration = storage.get_mentor_by_user_id(member.user_id)
        elif member.role is Role.STUDENT:
            registration = storage.get_student_by_user_id(member.user_id)
        else:
            registration = None

        enriched.append(
            EnrichedCohortMember(
                **member.model_dump(),
                user=storage.get_user(member.user_id),
                registration=registration,
            )
        )
    return enriched


def _named(
    assignment: AssignmentRecord,
    mentor_names: dict[int, str],
    student_names: dict[int, str],
    cohort_names: dict[int, str] | None = None,
) -> NamedAssignment:
    cohort_name = None
    if cohort_names is not None and assignment.cohort_id is not None:
        cohort_name = cohort_names.get(assignment.cohort_id, UNKNOWN_COHORT)

    return NamedAssignment(
        **assignment.model_dump(),
        mentor_name=mentor_names.get(assignment.mentor_id, UNKNOWN_MENTOR),
        student_name=student_names.get(assignment.student_id, UNKNOWN_STUDENT),
        cohort_name=cohort_name,
    )


def list_cohort_assignments(storage: Storage, cohort_id: int) -> list[NamedAssignment]:
    named: list[NamedAssignment] = []
    for assignment in storage.list_assignments_by_cohort(cohort_id):
        mentor = storage.get_mentor_registration(assignment.mentor_id)
        student = storage.get_student_registration(assignment.student_id)
        named.append(
            _named(
                assignment,
                {mentor.id: mentor.full_name} if mentor is not None else {},
                {student.id: student.full_name} if student is not None else {},
            )
        )
    return named


def list_all_assignments(storage: Storage) -> list[NamedAssignment]:
    mentor_names = {mentor.id: mentor.full_name for mentor in storage.list_mentor_registrations()}
    student_names = {student.id: student.full_name for student in storage.list_student_registrations()}
    cohort_names = {cohort.id: cohort.name for cohort in storage.list_cohorts()}

    return [
        _named(assignment, mentor_names, student_names, cohort_names)
        for assignment in storage.list_assignments()
    ]


def create_assignment(
    storage: Storage,
    mentor_id: int,
    student_id: int,
    cohort_id: int | None = None,
) -> AssignmentRecord:
    """Pair a mentor registration with a student registration.

    Raises:
        NotFoundError: If either registration, or the cohort when given, is missing.
    """
    mentor = storage.get_mentor_registration(mentor_id)
    student = storage.get_student_registration(student_id)
    if mentor is None or student is None:
        raise NotFoundError('Mentor or student not found.')

    if cohort_id is not None and storage.get_cohort(cohort_id) is None:
        raise NotFoundError('Cohort not found.')

    assignment = storage.create_assignment(
        {
            'cohort_id': cohort_id,
            'mentor_id': mentor.id,
            'student_id': student.id,
            'mentor_user_id': mentor.user_id,
            'student_user_id': student.user_id,
            'is_active': True,
        }
    )
    logger.info('Assigned mentor %s to student %s in cohort %s', mentor.id, student.id, cohort_id)
    return assignment
