"""
Domain common module.

Contains base classes for domain modeling:
- ValueObject: Immutable objects defined by their attributes
- Entity: Objects with identity and lifecycle
- Domain exceptions shared by every context
"""

from .entity import Entity, EntityId
from .exceptions import DomainError, EntityNotFoundError, ValidationError
from .value_object import ValueObject

__all__ = [
    "DomainError",
    "Entity",
    "EntityId",
    "EntityNotFoundError",
    "ValidationError",
    "ValueObject",
]
