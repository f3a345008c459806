"""Registration and login routes and password helpers."""

import structlog
from fastapi import APIRouter, Depends, status
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import schemas, crud
from .core import get_settings
from .database import get_db
from .exceptions import AuthError
from .models import User

logger = structlog.get_logger()

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=get_settings().BCRYPT_ROUNDS,
)
router = APIRouter(prefix="/api/auth", tags=["auth"])


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plain password with its hashed value."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate a salted password hash using the configured context."""
    return pwd_context.hash(password)


def register_user(db: Session, user_in: schemas.UserCreate) -> User:
    """Hash the password and store a new user."""
    return crud.create_user(db, user_in, get_password_hash(user_in.password))


def authenticate_user(db: Session, identifier: str, password: str) -> User:
    """
    Check credentials given as username or email plus password.

    Unknown accounts and wrong passwords fail with the same error.
    A dummy hash check runs for unknown accounts so both paths cost
    about the same.

    Args:
        db (Session): Database session.
        identifier (str): Username or email.
        password (str): Plain password.

    Raises:
        AuthError: If the credentials do not match a user.

    Returns:
        User: Authenticated user.
    """
    user = crud.get_user_by_login(db, identifier)
    if user is None:
        pwd_context.dummy_verify()
        logger.info("login_failed")
        raise AuthError()
    if not verify_password(password, user.hashed_password):
        logger.info("login_failed")
        raise AuthError()
    logger.info("login_succeeded", user_id=user.user_id)
    return user


@router.post(
    "/register",
    response_model=schemas.MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(user_in: schemas.UserCreate, db: Session = Depends(get_db)):
    """Register a new user. No user data is echoed back."""

    register_user(db, user_in)
    return schemas.MessageResponse(message="User created successfully")


@router.post("/login", response_model=schemas.LoginResponse)
def login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    """Authenticate by username or email and return the public user profile."""

    user = authenticate_user(db, credentials.username, credentials.password)
    return schemas.LoginResponse(
        message="Login successful",
        user=schemas.UserPublic.model_validate(user),
    )
