from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from emargement.auth.jwt_handler import TokenService, get_token_service
from emargement.auth.passwords import MAX_PASSWORD_BYTES
from emargement.database import get_db
from emargement.models.user import Role
from emargement.routes.validators import normalize_email, require_min_length
from emargement.services import accounts

router = APIRouter(tags=['auth'])

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6


def _validate_password(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
    if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise ValueError(f'Password must be {MAX_PASSWORD_BYTES} bytes or fewer.')
    return value


class SignupRequest(BaseModel):
    name: str
    email: str
    password: str
    role: Role

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return require_min_length(value, MIN_NAME_LENGTH, 'Name')

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _validate_password(value)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _validate_password(value)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: Role

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    token: str


@router.post('/signup', response_model=UserResponse)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    return accounts.create_user(db, data.name, data.email, data.password, data.role)


@router.post('/login', response_model=TokenResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
):
    token = accounts.login(db, token_service, data.email, data.password)
    return {'token': token}
