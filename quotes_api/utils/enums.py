"""Closed value sets shared by models, schemas and services."""

from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class ActivityAction(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    QUOTE_VIEWED = "quote_viewed"
    PROFILE_UPDATED = "profile_updated"
    FAVORITE_ADDED = "favorite_added"
    FAVORITE_REMOVED = "favorite_removed"
    QUOTE_CREATED = "quote_created"
    QUOTE_UPDATED = "quote_updated"
    QUOTE_DELETED = "quote_deleted"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    QUOTES_IMPORTED = "quotes_imported"
    QUOTES_EXPORTED = "quotes_exported"


class UserDeletionPolicy(str, Enum):
    """What happens to a deleted user's activity records.

    Favorites and view history always go with the user.
    """

    RETAIN = "retain"
    PURGE = "purge"
