"""DTOs for learning use cases."""

from dataclasses import dataclass, field

from smartalk.domain.learning.entities.learning_session import LearningPhase
from smartalk.domain.learning.entities.progress_record import ProgressRecord
from smartalk.domain.learning.services.focus_mode import FocusState, FocusTransition
from smartalk.domain.learning.services.milestone_detector import Milestone


@dataclass
class AttemptOutcome:
    """Everything a single recorded attempt produced."""

    record: ProgressRecord
    focus_state: FocusState
    phase: LearningPhase
    focus_transition: FocusTransition | None = None
    milestones: list[Milestone] = field(default_factory=list)

    @property
    def magic_moment(self) -> bool:
        return any(m.triggers_magic_moment for m in self.milestones)
