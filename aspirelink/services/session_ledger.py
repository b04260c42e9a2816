"""Mentoring session create/reschedule/delete.

Any valid status may be written by any caller allowed to edit sessions;
there are no transition rules between statuses.
"""

import logging

from aspirelink.core.errors import NotFoundError
from aspirelink.core.roles import SessionStatus
from aspirelink.schemas.records import MentoringSessionRecord
from aspirelink.schemas.requests import SessionCreate, SessionUpdate
from aspirelink.storage.base import Storage

logger = logging.getLogger(__name__)


def create_session(storage: Storage, data: SessionCreate, created_by: str) -> MentoringSessionRecord:
    assignment = storage.get_assignment(data.assignment_id)
    if assignment is None:
        raise NotFoundError('Assignment not found.')

    values = data.model_dump()
    if values['cohort_id'] is None:
        values['cohort_id'] = assignment.cohort_id

    session = storage.create_session(
        {
            **values,
            'status': SessionStatus.SCHEDULED,
            'created_by': created_by,
        }
    )
    logger.info('Session %s scheduled for assignment %s by %s', session.id, assignment.id, created_by)
    return session


def update_session(storage: Storage, session_id: int, patch: SessionUpdate) -> MentoringSessionRecord:
    updates = patch.model_dump(exclude_unset=True)
    session = storage.update_session(session_id, updates)
    if session is None:
        raise NotFoundError('Session not found.')
    return session


def delete_session(storage: Storage, session_id: int) -> None:
    if not storage.delete_session(session_id):
        raise NotFoundError('Session not found.')
    logger.info('Session %s deleted', session_id)


def list_sessions_for_assignment(storage: Storage, assignment_id: int) -> list[MentoringSessionRecord]:
    return storage.list_sessions_by_assignment(assignment_id)
