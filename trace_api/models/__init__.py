"""SQLAlchemy models for the MVC architecture."""

from .base import Base
from .traceback import Traceback  # noqa: F401

__all__ = ["Base", "Traceback"]
