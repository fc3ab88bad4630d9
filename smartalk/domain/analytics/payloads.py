"""
Typed views over sanitized event payloads.

Event kinds with a known shape get a frozen dataclass whose fields are read
leniently from the sanitized map (wrong types become None). Fields the class
does not declare are kept in ``extra``. Kinds without a registered shape use
OpaquePayload, which wraps the map unchanged.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Self

from smartalk.domain.analytics.event_types import EventType


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    return None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class EventPayload:
    """Base class for every payload view."""

    # Maps declared field names to the camelCase keys mobile clients send
    aliases: ClassVar[dict[str, str]] = {}
    converters: ClassVar[dict[str, Any]] = {}

    extra: dict[str, Any] = field(default_factory=dict, kw_only=True)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        values: dict[str, Any] = {}
        consumed: set[str] = set()
        for f in fields(cls):
            if f.name == "extra":
                continue
            for key in (f.name, cls.aliases.get(f.name)):
                if key is not None and key in data:
                    converter = cls.converters.get(f.name, _as_str)
                    values[f.name] = converter(data[key])
                    consumed.add(key)
                    break
        extra = {k: v for k, v in data.items() if k not in consumed}
        return cls(**values, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        """Flatten back to a map, declared fields under their client keys."""
        result = dict(self.extra)
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is not None:
                result[self.aliases.get(f.name, f.name)] = value
        return result


@dataclass(frozen=True)
class OpaquePayload(EventPayload):
    """Open-ended payload; everything lives in ``extra``."""


@dataclass(frozen=True)
class VtprAnswerPayload(EventPayload):
    aliases: ClassVar[dict[str, str]] = {
        "keyword_id": "keywordId",
        "drama_id": "dramaId",
        "option_id": "optionId",
        "time_spent": "timeSpent",
    }
    converters: ClassVar[dict[str, Any]] = {
        "keyword_id": _as_str,
        "drama_id": _as_str,
        "option_id": _as_str,
        "attempts": _as_int,
        "time_spent": _as_float,
    }

    keyword_id: str | None = None
    drama_id: str | None = None
    option_id: str | None = None
    attempts: int | None = None
    time_spent: float | None = None


@dataclass(frozen=True)
class KeywordProgressPayload(EventPayload):
    """Payload of keyword completion and unlock events."""

    aliases: ClassVar[dict[str, str]] = {
        "keyword_id": "keywordId",
        "drama_id": "dramaId",
        "time_spent": "timeSpent",
        "total_completed": "totalCompleted",
        "total_keywords": "totalKeywords",
    }
    converters: ClassVar[dict[str, Any]] = {
        "keyword_id": _as_str,
        "drama_id": _as_str,
        "attempts": _as_int,
        "time_spent": _as_float,
        "accuracy": _as_float,
        "total_completed": _as_int,
        "total_keywords": _as_int,
    }

    keyword_id: str | None = None
    drama_id: str | None = None
    attempts: int | None = None
    time_spent: float | None = None
    accuracy: float | None = None
    total_completed: int | None = None
    total_keywords: int | None = None


@dataclass(frozen=True)
class OnboardingStepPayload(EventPayload):
    aliases: ClassVar[dict[str, str]] = {"step_index": "stepIndex", "step_name": "stepName"}
    converters: ClassVar[dict[str, Any]] = {"step_index": _as_int, "step_name": _as_str}

    step_index: int | None = None
    step_name: str | None = None


@dataclass(frozen=True)
class InterestSelectedPayload(EventPayload):
    aliases: ClassVar[dict[str, str]] = {"interest_id": "interestId"}

    interest_id: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class VideoPreviewPayload(EventPayload):
    aliases: ClassVar[dict[str, str]] = {"video_id": "videoId", "watch_time": "watchTime"}
    converters: ClassVar[dict[str, Any]] = {
        "video_id": _as_str,
        "position": _as_float,
        "watch_time": _as_float,
    }

    video_id: str | None = None
    position: float | None = None
    watch_time: float | None = None


@dataclass(frozen=True)
class MagicMomentPayload(EventPayload):
    aliases: ClassVar[dict[str, str]] = {"drama_id": "dramaId", "completion_time": "completionTime"}
    converters: ClassVar[dict[str, Any]] = {
        "drama_id": _as_str,
        "completion_time": _as_float,
        "rating": _as_int,
    }

    drama_id: str | None = None
    completion_time: float | None = None
    rating: int | None = None


@dataclass(frozen=True)
class MilestonePayload(EventPayload):
    aliases: ClassVar[dict[str, str]] = {
        "milestone_type": "milestoneType",
        "unit_group_id": "unitGroupId",
        "item_id": "itemId",
    }
    converters: ClassVar[dict[str, Any]] = {
        "milestone_type": _as_str,
        "unit_group_id": _as_int,
        "item_id": _as_int,
    }

    milestone_type: str | None = None
    unit_group_id: int | None = None
    item_id: int | None = None


@dataclass(frozen=True)
class FocusModePayload(EventPayload):
    aliases: ClassVar[dict[str, str]] = {
        "item_id": "itemId",
        "consecutive_incorrect": "consecutiveIncorrect",
    }
    converters: ClassVar[dict[str, Any]] = {"item_id": _as_int, "consecutive_incorrect": _as_int}

    item_id: int | None = None
    consecutive_incorrect: int | None = None


PAYLOAD_TYPES: dict[EventType, type[EventPayload]] = {
    EventType.VTPR_OPTION_SELECT: VtprAnswerPayload,
    EventType.VTPR_ANSWER_CORRECT: VtprAnswerPayload,
    EventType.VTPR_ANSWER_INCORRECT: VtprAnswerPayload,
    EventType.VTPR_KEYWORD_COMPLETE: KeywordProgressPayload,
    EventType.KEYWORD_UNLOCK: KeywordProgressPayload,
    EventType.ONBOARDING_STEP_COMPLETE: OnboardingStepPayload,
    EventType.INTEREST_SELECTED: InterestSelectedPayload,
    EventType.VIDEO_PREVIEW_START: VideoPreviewPayload,
    EventType.VIDEO_PREVIEW_PLAY: VideoPreviewPayload,
    EventType.VIDEO_PREVIEW_PAUSE: VideoPreviewPayload,
    EventType.VIDEO_PREVIEW_COMPLETE: VideoPreviewPayload,
    EventType.MAGIC_MOMENT_START: MagicMomentPayload,
    EventType.MAGIC_MOMENT_COMPLETE: MagicMomentPayload,
    EventType.MAGIC_MOMENT_FEEDBACK: MagicMomentPayload,
    EventType.MILESTONE_REACHED: MilestonePayload,
    EventType.FOCUS_MODE_TRIGGERED: FocusModePayload,
    EventType.FOCUS_MODE_SUCCESS: FocusModePayload,
}


def parse_payload(event_type: EventType, data: Mapping[str, Any]) -> EventPayload:
    """Build the typed view for an event kind, falling back to OpaquePayload."""
    payload_cls = PAYLOAD_TYPES.get(event_type, OpaquePayload)
    return payload_cls.from_mapping(data)
