from quotes_api.database.repositories.activity_repository import ActivityRepository
from quotes_api.database.repositories.quote_repository import QuoteRepository
from quotes_api.database.repositories.user_repository import UserRepository

__all__ = ["ActivityRepository", "QuoteRepository", "UserRepository"]
