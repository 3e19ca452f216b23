"""FastAPI routers acting as controllers in the MVC architecture."""

from . import analyze, query

__all__ = ["analyze", "query"]
