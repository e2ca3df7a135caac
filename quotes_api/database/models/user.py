"""User model - synced with Firebase Authentication on first verified request."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from quotes_api.database.models.column_types import JSONType
from quotes_api.database.models.model_base import SqlAlchemyModel, utcnow
from quotes_api.utils.enums import Theme, UserRole


def default_preferences() -> Dict[str, Any]:
    return {"theme": Theme.LIGHT.value, "email_notifications": True}


class User(SqlAlchemyModel):
    __tablename__ = "users"

    firebase_uid: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    display_name: Mapped[Optional[str]] = mapped_column(String(255))

    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name="user_role",
            native_enum=False,
            length=20,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=UserRole.USER,
        index=True,
    )

    preferences: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=default_preferences,
    )

    last_login: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User uid={self.firebase_uid} email={self.email}>"
