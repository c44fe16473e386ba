"""Application-wide constants."""
from enum import Enum


# Local store slots
SESSION_KEY = "zxs-auth-session"
USERS_KEY = "zxs-users"
TODOS_KEY = "zxs-todos-all"
COMPANIES_KEY = "zxs-companies"


# Seeded administrator
ADMIN_EMAIL = "admin@zxsgit.local"
ADMIN_NAME = "Admin"
ADMIN_PASSWORD = "admin321"


class UserRole:
    """User role constants."""
    ADMIN = "admin"
    MEMBER = "member"


class ChangeEvent(str, Enum):
    """Collection change notifications."""
    USERS = "users:update"
    COMPANIES = "companies:update"
    TODOS = "todos:update"


# Company defaults and limits
GALLERY_LIMIT = 5
UNKNOWN_OWNER_EMAIL = "unknown@zxsgit.local"
UNKNOWN_OWNER_NAME = "Unknown"
