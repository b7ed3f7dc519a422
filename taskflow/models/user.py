"""ORM model for application users (registration and JWT authentication)."""

from sqlalchemy import Column, DateTime, String

from taskflow.models.base import Base, new_id, utcnow


class User(Base):
    """
    User account. Email is stored lower-cased so the unique index makes it
    case-insensitive; the password is only ever stored as a bcrypt hash.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
