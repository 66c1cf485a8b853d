"""User registration and login."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from streetsafety.core.exceptions import AuthError, StoreError, ValidationError
from streetsafety.core.security import hash_password, verify_password
from streetsafety.models.user_account import UserAccount

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def register_user(db: Session, username: str, email: str, password: str) -> UserAccount:
    """
    Create a user account.

    Raises:
        ValidationError: Missing fields or the email is already registered
        StoreError: Persisting failed
    """
    email = normalize_email(email)
    username = (username or "").strip()
    if not username or not email or not password:
        raise ValidationError("Registration failed: username, email and password are required")

    user = UserAccount(username=username, email=email, password_hash=hash_password(password))
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("Registration failed: email already registered", field="email") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error registering user: {str(e)}", exc_info=True)
        raise StoreError(f"Registration failed: {str(e)}") from e

    logger.info(f"User registered: {email}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> UserAccount:
    """
    Check credentials and return the account.

    The account email doubles as the voter identifier; no session token is
    issued.

    Raises:
        AuthError: Unknown email or wrong password
    """
    try:
        user = db.query(UserAccount).filter(UserAccount.email == normalize_email(email)).first()
    except SQLAlchemyError as e:
        logger.error(f"Error loading user: {str(e)}", exc_info=True)
        raise StoreError(f"Login failed: {str(e)}") from e

    if user is None or not verify_password(password or "", user.password_hash):
        raise AuthError("Invalid credentials")
    return user
