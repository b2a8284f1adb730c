"""Training sessions and their attendance sheets.

Operations that resolve a user by email or name and then write a row run as
two statements. They are not atomic with respect to a concurrent change of
that user; accounts are never deleted, so the lookup cannot go stale.
"""

import logging
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from emargement.core import config
from emargement.core.errors import ConflictError, NotFoundError
from emargement.models.attendance import PRESENT_STATUS, Attendance
from emargement.models.training_session import TrainingSession
from emargement.models.user import User
from emargement.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def format_calendar_date(value: date | datetime | str | None) -> str | None:
    """Render a stored session date as YYYY-MM-DD whatever type the driver returned."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def serialize_session(training_session: TrainingSession) -> dict:
    return {
        'id': training_session.id,
        'title': training_session.title,
        'date': format_calendar_date(training_session.date),
        'formateur_id': training_session.formateur_id,
    }


def create_session(db: Session, trainer_email: str, title: str, session_date: date) -> TrainingSession:
    trainer = CredentialStore(db).find_by_email(trainer_email)
    if trainer is None:
        raise NotFoundError('User not found')

    training_session = TrainingSession(title=title, date=session_date, formateur_id=trainer.id)
    db.add(training_session)
    db.commit()
    db.refresh(training_session)

    logger.info('Created session %s for trainer %s', training_session.id, trainer.id)
    return training_session


def list_sessions(db: Session) -> list[TrainingSession]:
    return db.query(TrainingSession).order_by(TrainingSession.id.asc()).all()


def get_session(db: Session, session_id: int) -> TrainingSession:
    training_session = db.get(TrainingSession, session_id)
    if training_session is None:
        raise NotFoundError('Session not found')
    return training_session


def update_session(
    db: Session,
    session_id: int,
    new_title: str,
    new_date: date,
    new_trainer_name: str,
) -> TrainingSession:
    trainer = CredentialStore(db).find_by_name(new_trainer_name)
    if trainer is None:
        raise NotFoundError('User not found')

    updated_rows = db.query(TrainingSession).filter(TrainingSession.id == session_id).update(
        {
            TrainingSession.title: new_title,
            TrainingSession.date: new_date,
            TrainingSession.formateur_id: trainer.id,
        },
        synchronize_session=False,
    )
    if updated_rows == 0:
        db.rollback()
        raise NotFoundError('Session not found')

    db.commit()
    logger.info('Updated session %s, trainer is now %s', session_id, trainer.id)
    return get_session(db, session_id)


def delete_session(db: Session, session_id: int) -> int:
    """Delete a session and its attendance rows. Unknown ids are a no-op returning 0."""
    training_session = db.get(TrainingSession, session_id)
    if training_session is None:
        return 0

    db.delete(training_session)
    db.commit()
    logger.info('Deleted session %s', session_id)
    return 1


def record_attendance(
    db: Session,
    session_id: int,
    trainee_email: str,
    duplicate_policy: str | None = None,
) -> Attendance:
    policy = duplicate_policy or config.ATTENDANCE_DUPLICATE_POLICY

    trainee = CredentialStore(db).find_by_email(trainee_email)
    if trainee is None:
        raise NotFoundError('User not found')

    if db.get(TrainingSession, session_id) is None:
        raise NotFoundError('Session not found')

    existing = _find_attendance(db, session_id, trainee.id)
    if existing is not None:
        return _handle_duplicate(db, existing, policy)

    attendance = Attendance(session_id=session_id, etudiant_id=trainee.id, status=PRESENT_STATUS)
    db.add(attendance)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same pair first.
        db.rollback()
        existing = _find_attendance(db, session_id, trainee.id)
        if existing is None:
            raise
        return _handle_duplicate(db, existing, policy)

    db.refresh(attendance)
    logger.info('Recorded attendance of user %s at session %s', trainee.id, session_id)
    return attendance


def list_attendance(db: Session, session_id: int) -> list[dict]:
    rows = (
        db.query(User.name)
        .join(Attendance, Attendance.etudiant_id == User.id)
        .filter(Attendance.session_id == session_id)
        .order_by(Attendance.id.asc())
        .all()
    )
    return [{'name': name} for (name,) in rows]


def _find_attendance(db: Session, session_id: int, trainee_id: int) -> Attendance | None:
    return db.query(Attendance).filter(
        Attendance.session_id == session_id,
        Attendance.etudiant_id == trainee_id,
    ).first()


def _handle_duplicate(db: Session, existing: Attendance, policy: str) -> Attendance:
    if policy != 'overwrite':
        raise ConflictError('Attendance already recorded for this session')

    existing.status = PRESENT_STATUS
    db.commit()
    db.refresh(existing)
    return existing
