"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .deploy import (
    DeployFailureResponse,
    DeployResponse,
    DeployStageResponse,
    StackStatusResponse,
)

__all__ = [
    "DeployFailureResponse",
    "DeployResponse",
    "DeployStageResponse",
    "ErrorResponse",
    "StackStatusResponse",
]
