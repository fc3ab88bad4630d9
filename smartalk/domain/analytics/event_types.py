"""Fixed vocabulary of analytics event types."""

import re
from enum import Enum

from smartalk.domain.common.exceptions import ValidationError

EVENT_TYPE_PATTERN = re.compile(r"^[a-z_]+$")
MAX_EVENT_TYPE_LENGTH = 50


class EventType(str, Enum):
    """Every event type the engine accepts."""

    # Onboarding
    APP_LAUNCH = "app_launch"
    ONBOARDING_START = "onboarding_start"
    ONBOARDING_STEP_COMPLETE = "onboarding_step_complete"
    ONBOARDING_COMPLETE = "onboarding_complete"
    ONBOARDING_SKIP = "onboarding_skip"

    # Interest selection
    INTEREST_SELECTION_START = "interest_selection_start"
    INTEREST_SELECTED = "interest_selected"
    INTEREST_SELECTION_COMPLETE = "interest_selection_complete"

    # Video preview
    VIDEO_PREVIEW_START = "video_preview_start"
    VIDEO_PREVIEW_PLAY = "video_preview_play"
    VIDEO_PREVIEW_PAUSE = "video_preview_pause"
    VIDEO_PREVIEW_COMPLETE = "video_preview_complete"
    VIDEO_PREVIEW_SKIP = "video_preview_skip"

    # vTPR learning
    VTPR_START = "vtpr_start"
    VTPR_AUDIO_PLAY = "vtpr_audio_play"
    VTPR_OPTION_SELECT = "vtpr_option_select"
    VTPR_ANSWER_CORRECT = "vtpr_answer_correct"
    VTPR_ANSWER_INCORRECT = "vtpr_answer_incorrect"
    VTPR_HINT_USED = "vtpr_hint_used"
    VTPR_KEYWORD_COMPLETE = "vtpr_keyword_complete"
    VTPR_SESSION_COMPLETE = "vtpr_session_complete"
    VTPR_SESSION_ABANDON = "vtpr_session_abandon"

    # Magic moment
    MAGIC_MOMENT_TRIGGER = "magic_moment_trigger"
    MAGIC_MOMENT_START = "magic_moment_start"
    MAGIC_MOMENT_VIDEO_PLAY = "magic_moment_video_play"
    MAGIC_MOMENT_VIDEO_COMPLETE = "magic_moment_video_complete"
    MAGIC_MOMENT_COMPLETE = "magic_moment_complete"
    MAGIC_MOMENT_FEEDBACK = "magic_moment_feedback"

    # Retention
    RETENTION_DAY1 = "retention_day1"
    RETENTION_DAY7 = "retention_day7"
    RETENTION_DAY30 = "retention_day30"

    # Errors
    ERROR_VIDEO_LOAD = "error_video_load"
    ERROR_AUDIO_LOAD = "error_audio_load"
    ERROR_API_CALL = "error_api_call"
    ERROR_NETWORK = "error_network"

    # Performance
    PERFORMANCE_APP_START = "performance_app_start"
    PERFORMANCE_VIDEO_LOAD_TIME = "performance_video_load_time"
    PERFORMANCE_API_RESPONSE_TIME = "performance_api_response_time"

    # Emitted by the engine itself
    KEYWORD_UNLOCK = "keyword_unlock"
    MILESTONE_REACHED = "milestone_reached"
    FOCUS_MODE_TRIGGERED = "focus_mode_triggered"
    FOCUS_MODE_SUCCESS = "focus_mode_success"

    @property
    def is_learning_event(self) -> bool:
        """Events that count towards estimated learning time."""
        return self.value.startswith("vtpr_") or "video_" in self.value

    @property
    def is_study_event(self) -> bool:
        """Events that mark a calendar day as a study day."""
        return self.value.startswith("vtpr_")

    @classmethod
    def parse(cls, raw: object) -> "EventType":
        """
        Parse a raw event type, rejecting anything outside the vocabulary.

        Raises:
            ValidationError: If the value is malformed or unknown
        """
        if isinstance(raw, EventType):
            return raw
        if not isinstance(raw, str) or not raw:
            raise ValidationError("Event type must be a non-empty string", field="event_type")
        if len(raw) > MAX_EVENT_TYPE_LENGTH or not EVENT_TYPE_PATTERN.match(raw):
            raise ValidationError(
                "Event type must match ^[a-z_]+$ and be at most 50 characters",
                field="event_type",
                value=raw,
            )
        try:
            return cls(raw)
        except ValueError:
            raise ValidationError(
                f"Invalid event type: {raw}", field="event_type", value=raw
            ) from None


# Ordered steps from first launch to the activation event
DEFAULT_FUNNEL_STEPS: tuple[EventType, ...] = (
    EventType.APP_LAUNCH,
    EventType.ONBOARDING_START,
    EventType.ONBOARDING_COMPLETE,
    EventType.INTEREST_SELECTED,
    EventType.VIDEO_PREVIEW_START,
    EventType.VTPR_START,
    EventType.VTPR_SESSION_COMPLETE,
    EventType.MAGIC_MOMENT_START,
    EventType.MAGIC_MOMENT_COMPLETE,
)
