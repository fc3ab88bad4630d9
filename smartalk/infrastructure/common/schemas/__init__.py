"""Common schemas shared across contexts."""

from smartalk.infrastructure.common.schemas.response_wrappers import PaginatedResponse

__all__ = ["PaginatedResponse"]
