# agenda/models/__init__.py
from .base import Base
from .document import StoredDocument
from .write_guard import WriteGuard

__all__ = [
    "Base",
    "StoredDocument",
    "WriteGuard",
]
