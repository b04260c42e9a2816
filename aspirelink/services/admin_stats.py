from aspirelink.schemas.responses import AdminStats
from aspirelink.storage.base import Storage


def compute_admin_stats(storage: Storage) -> AdminStats:
    students = storage.list_student_registrations()
    mentors = storage.list_mentor_registrations()
    cohorts = storage.list_cohorts()

    return AdminStats(
        total_students=len(students),
        total_mentors=len(mentors),
        active_students=sum(1 for student in students if student.is_active),
        active_mentors=sum(1 for mentor in mentors if mentor.is_active),
        total_assignments=len(storage.list_assignments()),
        total_cohorts=len(cohorts),
        active_cohorts=sum(1 for cohort in cohorts if cohort.is_active),
    )
