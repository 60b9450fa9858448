from .client import OreallyClient

__all__ = [
    "OreallyClient",
]
