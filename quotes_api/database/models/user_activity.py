from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from quotes_api.database.models.column_types import JSONType
from quotes_api.database.models.model_base import utcnow
from quotes_api.database.session import Base
from quotes_api.utils.enums import ActivityAction


class UserActivity(Base):
    """Append-only audit record.

    user_id is a plain reference (no foreign key) so records can outlive
    the user they describe.
    """

    __tablename__ = "user_activities"
    __table_args__ = (Index("ix_user_activities_user_timestamp", "user_id", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[ActivityAction] = mapped_column(
        Enum(
            ActivityAction,
            name="activity_action",
            native_enum=False,
            length=32,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        index=True,
    )
    details: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    ip: Mapped[Optional[str]] = mapped_column(String(64))
    user_agent: Mapped[Optional[str]] = mapped_column(String(512))
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserActivity user_id={self.user_id} action={self.action.value}>"
