from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from quotes_api.database.models.model_base import SqlAlchemyModel


class Favorite(SqlAlchemyModel):
    """A quote bookmarked by a user. Row id gives insertion order."""

    __tablename__ = "user_favorites"
    __table_args__ = (UniqueConstraint("user_id", "quote_id", name="uq_user_favorites_user_quote"),)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    quote_id: Mapped[int] = mapped_column(
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Favorite user_id={self.user_id} quote_id={self.quote_id}>"
