"""
Type definitions for responses-lib-python.
"""

from responses_lib.types.model import KnownModel, model_name, parse_model
from responses_lib.types.request import Container, Request, Tool
from responses_lib.types.response import DeletedResponse, Response

__all__ = [
    "Container",
    "DeletedResponse",
    "KnownModel",
    "Request",
    "Response",
    "Tool",
    "model_name",
    "parse_model",
]
