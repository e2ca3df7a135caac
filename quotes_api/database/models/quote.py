from typing import Iterable, List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotes_api.database.models.model_base import SqlAlchemyModel
from quotes_api.database.session import Base

# Longest tag the quote_tags column stores
MAX_TAG_LENGTH = 50


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Lowercase, strip and de-duplicate tags, keeping first-seen order."""
    seen: List[str] = []
    for tag in tags or []:
        value = str(tag).strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen


class QuoteTag(Base):
    __tablename__ = "quote_tags"
    __table_args__ = (UniqueConstraint("quote_id", "tag", name="uq_quote_tags_quote_tag"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote_id: Mapped[int] = mapped_column(
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag: Mapped[str] = mapped_column(String(MAX_TAG_LENGTH), nullable=False, index=True)

    quote: Mapped["Quote"] = relationship(back_populates="tag_rows")


class Quote(SqlAlchemyModel):
    __tablename__ = "quotes"
    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_quotes_views_non_negative"),
        Index("ix_quotes_created_at", "created_at"),
    )

    text: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    source: Mapped[Optional[str]] = mapped_column(String(200))
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tag_rows: Mapped[List[QuoteTag]] = relationship(
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by=QuoteTag.id,
        lazy="selectin",
    )

    @property
    def tags(self) -> List[str]:
        return [row.tag for row in self.tag_rows]

    @tags.setter
    def tags(self, values: Optional[Iterable[str]]) -> None:
        # Reuse rows for tags that survive so the unique pair is never inserted twice
        existing = {row.tag: row for row in self.tag_rows}
        self.tag_rows = [existing.get(tag) or QuoteTag(tag=tag) for tag in normalize_tags(values)]

    def __repr__(self) -> str:
        return f"<Quote id={self.id} author={self.author}>"
