import logging
import re

from fastapi import APIRouter, Depends, status
from pydantic import ValidationInfo, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from showcase.auth.dependencies import get_current_user, get_token_service
from showcase.auth.jwt_handler import TokenService
from showcase.auth.passwords import hash_password, verify_password
from showcase.core import config
from showcase.database import get_db
from showcase.errors import DuplicateEmail, InvalidCredentials, NotFound, internal_fault
from showcase.models.user import (
    DEFAULT_BRANCH,
    DEFAULT_UNIVERSITY,
    DEFAULT_YEAR,
    MAX_YEAR,
    MIN_YEAR,
    Role,
    User,
)
from showcase.views import CamelModel, UserView, user_view

logger = logging.getLogger(__name__)

router = APIRouter(tags=['auth'])

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def normalize_email(value: str) -> str:
    return value.strip().lower()


def _validate_year(value: int | None) -> int | None:
    if value is not None and not MIN_YEAR <= value <= MAX_YEAR:
        raise ValueError(f'Year must be between {MIN_YEAR} and {MAX_YEAR}.')
    return value


class RegisterRequest(CamelModel):
    name: str
    email: str
    password: str
    university: str | None = None
    branch: str | None = None
    year: int | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name, email, and password are required')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = normalize_email(value)
        if not normalized:
            raise ValueError('Name, email, and password are required')
        if not EMAIL_PATTERN.match(normalized):
            raise ValueError('Please enter a valid email address')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Name, email, and password are required')
        if len(value) < config.PASSWORD_MIN_LENGTH:
            raise ValueError(f'Password must be at least {config.PASSWORD_MIN_LENGTH} characters long')
        return value

    @field_validator('year')
    @classmethod
    def validate_year(cls, value: int | None) -> int | None:
        return _validate_year(value)


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = normalize_email(value)
        if not normalized:
            raise ValueError('Email and password are required')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Email and password are required')
        return value


class UpdateProfileRequest(CamelModel):
    name: str | None = None
    university: str | None = None
    branch: str | None = None
    year: int | None = None
    avatar: str | None = None
    bio: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str:
        normalized = (value or '').strip()
        if not normalized:
            raise ValueError('Name cannot be empty')
        return normalized

    @field_validator('university', 'branch', 'year')
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        # Omit a field to keep it; these columns always hold a value.
        if value is None:
            raise ValueError(f'{info.field_name.capitalize()} cannot be null.')
        return value

    @field_validator('year')
    @classmethod
    def validate_year(cls, value: int | None) -> int | None:
        return _validate_year(value)


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserView


class ProfileResponse(CamelModel):
    user: UserView


class ProfileUpdateResponse(CamelModel):
    message: str
    user: UserView


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


@router.post('/register', response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        if find_user_by_email(db, data.email) is not None:
            logger.info('Registration rejected, email already in use')
            raise DuplicateEmail()

        user = User(
            name=data.name,
            email=data.email,
            hashed_password=hash_password(data.password),
            university=data.university or DEFAULT_UNIVERSITY,
            branch=data.branch or DEFAULT_BRANCH,
            year=data.year or DEFAULT_YEAR,
            role=Role.USER.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        # Lost the race against a concurrent registration for the same email.
        db.rollback()
        raise DuplicateEmail() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Registration failed')
        raise internal_fault('Server error during registration', exc) from exc

    logger.info('Registered user %s', user.id)
    return AuthResponse(
        message='User registered successfully',
        token=tokens.create_access_token(user.id),
        user=user_view(user),
    )


@router.post('/login', response_model=AuthResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        user = find_user_by_email(db, data.email)
    except SQLAlchemyError as exc:
        logger.exception('Login lookup failed')
        raise internal_fault('Server error during login', exc) from exc

    if user is None or not verify_password(data.password, user.hashed_password):
        raise InvalidCredentials()

    logger.info('User %s logged in', user.id)
    return AuthResponse(
        message='Login successful',
        token=tokens.create_access_token(user.id),
        user=user_view(user),
    )


@router.get('/profile', response_model=ProfileResponse)
def get_profile(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        user = db.get(User, current_user.id)
    except SQLAlchemyError as exc:
        logger.exception('Profile lookup failed')
        raise internal_fault('Server error getting profile', exc) from exc

    if user is None:
        raise NotFound('User not found')
    return ProfileResponse(user=user_view(user))


@router.put('/profile', response_model=ProfileUpdateResponse)
def update_profile(
    data: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        user = db.get(User, current_user.id)
        if user is None:
            raise NotFound('User not found')

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)

        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Profile update failed')
        raise internal_fault('Server error updating profile', exc) from exc

    return ProfileUpdateResponse(message='Profile updated successfully', user=user_view(user))
