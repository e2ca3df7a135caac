"""Database models package - import all models so Alembic can discover them."""

from quotes_api.database.models.model_base import SqlAlchemyModel
from quotes_api.database.models.user import User
from quotes_api.database.models.quote import Quote, QuoteTag
from quotes_api.database.models.favorite import Favorite
from quotes_api.database.models.quote_view import QuoteView
from quotes_api.database.models.user_activity import UserActivity

__all__ = [
    "SqlAlchemyModel",
    "User",
    "Quote",
    "QuoteTag",
    "Favorite",
    "QuoteView",
    "UserActivity",
]
