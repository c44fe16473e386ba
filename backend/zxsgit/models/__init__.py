"""Models package."""
from zxsgit.models.user import User
from zxsgit.models.company import Company, GalleryImage, MediaItem
from zxsgit.models.todo import Todo
from zxsgit.models.session import Session

__all__ = ["User", "Company", "GalleryImage", "MediaItem", "Todo", "Session"]
