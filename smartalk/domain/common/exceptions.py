"""
Domain layer exceptions.

These exceptions represent domain-level errors that occur when
input is malformed or a referenced entity does not exist.
They are translated to responses by the infrastructure layer.
"""


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain exceptions inherit from this class
    so they can be caught and handled uniformly.
    """

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ValidationError(DomainError):
    """
    Raised when input fails validation before anything is persisted.

    Example: unknown event type, payload that is not an object.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: object = None,
        errors: list[str] | None = None,
    ) -> None:
        details: dict[str, object] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        if errors:
            details["errors"] = errors
        super().__init__(message, details)
        self.field = field
        self.value = value
        self.errors = errors or []


class EntityNotFoundError(DomainError):
    """
    Raised when an operation references an entity that does not exist.

    Surfaced to the caller and never retried.
    """

    def __init__(self, entity_type: str, entity_id: object) -> None:
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, {"entity_type": entity_type, "entity_id": entity_id})
        self.entity_type = entity_type
        self.entity_id = entity_id
