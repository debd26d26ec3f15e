# src/cinemesis/models/user.py
"""SQLAlchemy model for registered users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinemesis.db.session import Base
from cinemesis.models.columns import Identifier, utcnow


class User(Base):
    """Account that writes reviews and casts votes."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    activated: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
