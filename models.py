# models.py
# Role: SQLAlchemy ORM models for the bank dashboard.
#       Users and their sign-in sessions, plus the banks each user has linked
#       through the aggregation provider. Account balances and transactions
#       are always fetched fresh from the provider and never stored.

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from db import Base


class User(Base):
    """
    A registered dashboard user.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # Sign-in identifier (stored lower-cased)
    email = Column(String, nullable=False, unique=True, index=True)

    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")

    # werkzeug password hash, never the password itself
    password_hash = Column(String, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    banks = relationship("Bank", back_populates="user", cascade="all, delete-orphan", order_by="Bank.id")

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class UserSession(Base):
    """
    A signed-in browser session. The random secret is what the cookie holds.
    """

    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    secret = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="sessions")


class Bank(Base):
    """
    One linked bank item (access token from the public-token exchange).
    """

    __tablename__ = "banks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Provider item and the account picked at link time
    item_id = Column(String, nullable=False)
    account_id = Column(String, nullable=False)

    access_token = Column(String, nullable=False)

    # URL-safe id that can be shown instead of the provider account id
    sharable_id = Column(String, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="banks")
