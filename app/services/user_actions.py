# app/services/user_actions.py
#
# User Actions
# Sign-up, sign-in, session lookup, and logout against the local user store.
# The session secret travels explicitly: routes read it from the cookie and
# pass it in; nothing here touches request globals.

import secrets
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from app.logging_setup import get_logger
from models import User, UserSession

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Sign-in or sign-up could not produce a session."""


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def sign_in(db: Session, email: str, password: str) -> UserSession:
    """
    Check credentials and open a new session.

    Raises AuthenticationError for an unknown email or a wrong password.
    """
    email = _normalize_email(email)
    if not email or not password:
        raise AuthenticationError("Email and password are required")

    user = db.query(User).filter(User.email == email).first()
    if user is None or not check_password_hash(user.password_hash, password):
        logger.info("Rejected sign-in for %s", email)
        raise AuthenticationError("Invalid email or password")

    session = UserSession(user_id=user.id, secret=secrets.token_urlsafe(32))
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info("Session %s opened for user %s", session.id, user.id)
    return session


def sign_up(
    db: Session,
    email: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
) -> Tuple[User, UserSession]:
    """
    Register a user and sign them in.

    If the email is already registered we continue straight to sign-in,
    which still requires the right password.
    """
    email = _normalize_email(email)
    if not email or not password:
        raise AuthenticationError("Email and password are required")

    user = db.query(User).filter(User.email == email).first()
    if user is not None:
        logger.warning("Sign-up for existing user %s, continuing to sign-in", email)
    else:
        user = User(
            email=email,
            first_name=(first_name or "").strip(),
            last_name=(last_name or "").strip(),
            password_hash=generate_password_hash(password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Created user %s", user.id)

    session = sign_in(db, email, password)
    return user, session


def get_logged_in_user(db: Session, secret: Optional[str]) -> Optional[User]:
    """
    Return the user owning this session secret, or None.
    """
    if not secret:
        return None
    try:
        session = db.query(UserSession).filter(UserSession.secret == secret).first()
    except SQLAlchemyError:
        logger.exception("Session lookup failed")
        return None
    return session.user if session is not None else None


def logout(db: Session, secret: Optional[str]) -> None:
    if not secret:
        return None
    try:
        db.query(UserSession).filter(UserSession.secret == secret).delete(
            synchronize_session=False
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Logout failed")
    return None
