from .books import BookRecord, BookRequest, DrainSummary

__all__ = [
    "BookRecord",
    "BookRequest",
    "DrainSummary",
]
