from .auth import router as auth_router
from .library import router as library_router
from .books import router as books_router

__all__ = [
    "auth_router",
    "library_router",
    "books_router",
]
