from .user import Base, User
from .book import GENRES, Book
from .review import Review, ReviewLike

__all__ = ["Base", "User", "GENRES", "Book", "Review", "ReviewLike"]
