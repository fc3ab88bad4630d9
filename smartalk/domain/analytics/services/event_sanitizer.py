"""
Domain service that bounds client-supplied event payloads.

This is a pure domain service with no infrastructure dependencies.
"""

from collections.abc import Mapping
from typing import Any

MAX_KEY_LENGTH = 50
MAX_STRING_LENGTH = 500
MAX_ARRAY_LENGTH = 10
MAX_DEPTH = 3
TRUNCATION_MARKER = "..."
TOO_DEEP_SENTINEL = "[Object too deep]"


class EventSanitizer:
    """
    Normalizes arbitrary payloads before they reach the event store.

    Sanitization never fails: it degrades payload fidelity instead of
    rejecting input, and sanitizing a sanitized payload changes nothing.
    """

    def sanitize(self, payload: object) -> dict[str, Any]:
        """
        Sanitize a top-level payload.

        Args:
            payload: Client-supplied mapping (anything else yields an empty dict)

        Returns:
            A new dict holding only bounded, JSON-friendly values
        """
        if not isinstance(payload, Mapping):
            return {}
        return self._sanitize_mapping(payload, depth=0)

    def _sanitize_mapping(self, mapping: Mapping[Any, Any], depth: int) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}
        for key, value in mapping.items():
            name = key if isinstance(key, str) else str(key)
            if len(name) > MAX_KEY_LENGTH:
                continue
            sanitized[name] = self._sanitize_value(value, depth)
        return sanitized

    def _sanitize_value(self, value: Any, depth: int) -> Any:
        if depth > MAX_DEPTH:
            return TOO_DEEP_SENTINEL

        if isinstance(value, str):
            if len(value) > MAX_STRING_LENGTH:
                return value[:MAX_STRING_LENGTH] + TRUNCATION_MARKER
            return value

        # bool is an int subclass, both pass through
        if value is None or isinstance(value, int | float):
            return value

        if isinstance(value, list | tuple):
            return [self._sanitize_value(item, depth + 1) for item in value[:MAX_ARRAY_LENGTH]]

        if isinstance(value, Mapping):
            return self._sanitize_mapping(value, depth + 1)

        return str(value)
