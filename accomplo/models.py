from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy import Column, DateTime, String, Text, ForeignKey, Index

Base = declarative_base()

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    email = Column(String, nullable=False, unique=True, index=True)   # stored lower-cased
    password_hash = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    avatar_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    profile = relationship("Profile", back_populates="user", uselist=False)

class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, unique=True)
    display_name = Column(String, nullable=True)
    avatar_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="profile")
    accomplishments = relationship("Accomplishment", back_populates="profile")

class Accomplishment(Base):
    __tablename__ = "accomplishments"
    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    profile_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(String, nullable=False)                    # "big" | "small"
    category = Column(String, nullable=False)                # free-text side note
    month_year = Column(String, nullable=False)              # "YYYY-MM"
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    profile = relationship("Profile", back_populates="accomplishments")

    __table_args__ = (
        Index("ix_accomplishments_profile_created", "profile_id", "created_at"),
    )
