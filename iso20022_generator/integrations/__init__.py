"""
Integrations with third-party libraries like Pydantic.
"""

from .pydantic import PydanticBatch, PydanticDocument, from_dataclass

__all__ = ["from_dataclass", "PydanticBatch", "PydanticDocument"]
