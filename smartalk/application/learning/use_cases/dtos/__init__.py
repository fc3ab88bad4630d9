"""DTOs for learning use cases."""

from smartalk.application.learning.use_cases.dtos.attempt_dtos import AttemptOutcome

__all__ = ["AttemptOutcome"]
