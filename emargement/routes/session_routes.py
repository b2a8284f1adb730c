from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from emargement.auth.dependencies import require_trainee, require_trainer
from emargement.auth.jwt_handler import Principal
from emargement.database import get_db
from emargement.routes.validators import normalize_email, require_iso_date_string, require_min_length
from emargement.services import sessions
from emargement.services.sessions import format_calendar_date, serialize_session

router = APIRouter(tags=['sessions'])

MIN_TITLE_LENGTH = 4
MIN_TRAINER_NAME_LENGTH = 2


class CreateSessionRequest(BaseModel):
    email: str
    title: str
    date_session: date

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return require_min_length(value, MIN_TITLE_LENGTH, 'Title')

    @field_validator('date_session', mode='before')
    @classmethod
    def validate_date_session(cls, value):
        return require_iso_date_string(value)


class UpdateSessionRequest(BaseModel):
    newTitle: str
    newDate_session: date
    newFormateurName: str

    @field_validator('newTitle')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return require_min_length(value, MIN_TITLE_LENGTH, 'Title')

    @field_validator('newFormateurName')
    @classmethod
    def validate_trainer_name(cls, value: str) -> str:
        return require_min_length(value, MIN_TRAINER_NAME_LENGTH, 'Trainer name')

    @field_validator('newDate_session', mode='before')
    @classmethod
    def validate_date_session(cls, value):
        return require_iso_date_string(value)


class AttendanceRequest(BaseModel):
    email: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class SessionResponse(BaseModel):
    id: int
    title: str
    date: str
    formateur_id: int


class CreatedSessionResponse(BaseModel):
    id: int
    title: str
    date: str
    id_formateur: int


class UpdatedSessionResponse(BaseModel):
    id: int
    new_title: str
    new_date: str
    new_id_formateur: int


class DeletedSessionResponse(BaseModel):
    id: int
    deleted: int


class AttendanceResponse(BaseModel):
    id: int
    id_session: int
    id_etudiant: int
    status: str


class AttendeeResponse(BaseModel):
    name: str


@router.post('', response_model=CreatedSessionResponse)
def create_session(
    data: CreateSessionRequest,
    principal: Principal = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    training_session = sessions.create_session(db, data.email, data.title, data.date_session)
    return {
        'id': training_session.id,
        'title': training_session.title,
        'date': format_calendar_date(training_session.date),
        'id_formateur': training_session.formateur_id,
    }


@router.get('', response_model=list[SessionResponse])
def list_sessions(db: Session = Depends(get_db)):
    return [serialize_session(training_session) for training_session in sessions.list_sessions(db)]


@router.get('/{session_id}', response_model=list[SessionResponse])
def get_session(session_id: int, db: Session = Depends(get_db)):
    return [serialize_session(sessions.get_session(db, session_id))]


@router.put('/{session_id}', response_model=UpdatedSessionResponse)
def update_session(
    session_id: int,
    data: UpdateSessionRequest,
    principal: Principal = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    training_session = sessions.update_session(
        db,
        session_id,
        data.newTitle,
        data.newDate_session,
        data.newFormateurName,
    )
    return {
        'id': training_session.id,
        'new_title': training_session.title,
        'new_date': format_calendar_date(training_session.date),
        'new_id_formateur': training_session.formateur_id,
    }


@router.delete('/{session_id}', response_model=DeletedSessionResponse)
def delete_session(
    session_id: int,
    principal: Principal = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    deleted = sessions.delete_session(db, session_id)
    return {'id': session_id, 'deleted': deleted}


@router.post('/{session_id}/emargement', response_model=AttendanceResponse)
def record_attendance(
    session_id: int,
    data: AttendanceRequest,
    principal: Principal = Depends(require_trainee),
    db: Session = Depends(get_db),
):
    attendance = sessions.record_attendance(db, session_id, data.email)
    return {
        'id': attendance.id,
        'id_session': attendance.session_id,
        'id_etudiant': attendance.etudiant_id,
        'status': attendance.status,
    }


@router.get('/{session_id}/emargement', response_model=list[AttendeeResponse])
def list_attendance(
    session_id: int,
    principal: Principal = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    return sessions.list_attendance(db, session_id)
