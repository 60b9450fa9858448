from .books import BooksApi
from .queue import QueueApi

__all__ = [
    "BooksApi",
    "QueueApi",
]
