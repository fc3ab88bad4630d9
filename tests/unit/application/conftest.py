"""In-memory collaborators for application use case tests."""

import copy
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime

import pytest

from smartalk.application.analytics.protocols.event_store import EventFilter
from smartalk.application.common.locks import KeyedLockRegistry
from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.analytics.services.event_sanitizer import EventSanitizer
from smartalk.domain.analytics.services.funnel_analyzer import FunnelAnalyzer
from smartalk.domain.common.value_objects import (
    EventId,
    ItemId,
    ProgressId,
    TimeWindow,
    UnitGroupId,
    UserId,
)
from smartalk.domain.learning.entities.progress_record import (
    ProgressDelta,
    ProgressKey,
    ProgressRecord,
)
from smartalk.domain.learning.services.focus_mode import FocusModeController, FocusTransition
from smartalk.domain.learning.services.milestone_detector import Milestone, MilestoneDetector
from smartalk.domain.learning.services.session_tracker import LearningSessionTracker
from smartalk.exceptions import PersistenceError
from smartalk.infrastructure.common.background import InlineDispatcher


class FakeEventStore:
    def __init__(self) -> None:
        self.events: list[AnalyticsEvent] = []
        self.append_calls = 0
        self.unreachable = False

    def append_event(self, event: AnalyticsEvent) -> EventId:
        return self.append_events([event])[0]

    def append_events(self, events: Sequence[AnalyticsEvent]) -> list[EventId]:
        self.append_calls += 1
        ids = []
        for event in events:
            stored = copy.deepcopy(event)
            stored.id = EventId(len(self.events) + 1)
            self.events.append(stored)
            ids.append(stored.id)
        return ids

    def query_events(self, event_filter: EventFilter) -> list[AnalyticsEvent]:
        matches = [e for e in self.events if self._matches(e, event_filter)]
        matches.sort(key=lambda e: (e.timestamp, e.id.value), reverse=event_filter.newest_first)
        matches = matches[event_filter.offset :]
        if event_filter.limit is not None:
            matches = matches[: event_filter.limit]
        return matches

    def count_events(self, event_filter: EventFilter) -> int:
        return sum(1 for e in self.events if self._matches(e, event_filter))

    def ping(self) -> None:
        if self.unreachable:
            raise PersistenceError("ping", "connection refused")

    @staticmethod
    def _matches(event: AnalyticsEvent, event_filter: EventFilter) -> bool:
        if event_filter.user_id is not None and event.user_id != event_filter.user_id:
            return False
        if event_filter.event_types and event.event_type not in event_filter.event_types:
            return False
        return event_filter.window.contains(event.timestamp)


class FakeUserDirectory:
    def __init__(self, created: dict[int, datetime] | None = None) -> None:
        self.created = dict(created or {})

    def add(self, user_id: int, created_at: datetime | None = None) -> None:
        self.created[user_id] = created_at or datetime.now(UTC)

    def exists(self, user_id: UserId) -> bool:
        return user_id.value in self.created

    def find_existing_ids(self, user_ids: Iterable[UserId]) -> set[UserId]:
        return {u for u in user_ids if u.value in self.created}

    def count_users(self) -> int:
        return len(self.created)

    def find_created_ids(self, window: TimeWindow) -> set[UserId]:
        return {UserId(u) for u, at in self.created.items() if window.contains(at)}


class FakeProgressRepository:
    """Stores records by key and hands out copies, like a database would."""

    def __init__(self) -> None:
        self.records: dict[ProgressKey, ProgressRecord] = {}

    def get_progress(self, key: ProgressKey) -> ProgressRecord | None:
        record = self.records.get(key)
        return copy.deepcopy(record) if record else None

    def upsert_progress(self, key: ProgressKey, delta: ProgressDelta) -> ProgressRecord:
        record = self.records.get(key)
        if record is None:
            record = ProgressRecord.create(key)
            record.id = ProgressId(len(self.records) + 1)
            self.records[key] = record
        record.apply(delta)
        return copy.deepcopy(record)

    def find_by_unit_group(
        self, user_id: UserId, unit_group_id: UnitGroupId
    ) -> list[ProgressRecord]:
        matches = [
            r
            for r in self.records.values()
            if r.user_id == user_id and r.unit_group_id == unit_group_id
        ]
        return [copy.deepcopy(r) for r in sorted(matches, key=lambda r: r.item_id.value)]


class FakeItemCatalog:
    def __init__(self) -> None:
        self.required: dict[int, set[int]] = {}
        self.optional: dict[int, set[int]] = {}

    def add_group(
        self, unit_group_id: int, required: Iterable[int], optional: Iterable[int] = ()
    ) -> None:
        self.required[unit_group_id] = set(required)
        self.optional[unit_group_id] = set(optional)

    def required_item_ids(self, unit_group_id: UnitGroupId) -> frozenset[ItemId]:
        return frozenset(ItemId(i) for i in self.required.get(unit_group_id.value, ()))

    def contains_item(self, unit_group_id: UnitGroupId, item_id: ItemId) -> bool:
        group = self.required.get(unit_group_id.value, set()) | self.optional.get(
            unit_group_id.value, set()
        )
        return item_id.value in group


class RecordingNotifier:
    def __init__(self) -> None:
        self.milestone_calls: list[tuple[UserId, UnitGroupId, ItemId, list[Milestone]]] = []
        self.focus_calls: list[tuple[UserId, ItemId, FocusTransition, int]] = []
        self.fail = False

    def notify_milestones(
        self,
        user_id: UserId,
        unit_group_id: UnitGroupId,
        item_id: ItemId,
        milestones: Sequence[Milestone],
    ) -> None:
        if self.fail:
            raise RuntimeError("notification channel down")
        self.milestone_calls.append((user_id, unit_group_id, item_id, list(milestones)))

    def notify_focus_transition(
        self,
        user_id: UserId,
        item_id: ItemId,
        transition: FocusTransition,
        consecutive_incorrect: int,
    ) -> None:
        if self.fail:
            raise RuntimeError("notification channel down")
        self.focus_calls.append((user_id, item_id, transition, consecutive_incorrect))


class RecordingDispatcher(InlineDispatcher):
    """Runs tasks inline and remembers their names."""

    def __init__(self) -> None:
        self.dispatched: list[str] = []

    def dispatch(self, name: str, task: Callable[[], None]) -> None:
        self.dispatched.append(name)
        super().dispatch(name, task)


@pytest.fixture
def event_store() -> FakeEventStore:
    return FakeEventStore()


@pytest.fixture
def user_directory() -> FakeUserDirectory:
    return FakeUserDirectory()


@pytest.fixture
def progress_repository() -> FakeProgressRepository:
    return FakeProgressRepository()


@pytest.fixture
def item_catalog() -> FakeItemCatalog:
    return FakeItemCatalog()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def sanitizer() -> EventSanitizer:
    return EventSanitizer()


@pytest.fixture
def analyzer() -> FunnelAnalyzer:
    return FunnelAnalyzer()


@pytest.fixture
def focus_mode() -> FocusModeController:
    return FocusModeController(trigger_threshold=2)


@pytest.fixture
def session_tracker() -> LearningSessionTracker:
    return LearningSessionTracker()


@pytest.fixture
def milestone_detector() -> MilestoneDetector:
    return MilestoneDetector()


@pytest.fixture
def locks() -> KeyedLockRegistry:
    return KeyedLockRegistry()
