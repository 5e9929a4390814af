"""FastAPI routers acting as controllers in the MVC architecture."""

from . import deploy

__all__ = ["deploy"]
