"""Use case for recording analytics events."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from smartalk.application.analytics.protocols.event_store import EventStoreProtocol
from smartalk.application.analytics.use_cases.dtos import BatchIngestionResult, EventInput
from smartalk.application.common.background import BackgroundDispatcherProtocol
from smartalk.application.identity.protocols.user_directory import UserDirectoryProtocol
from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.analytics.event_types import EventType
from smartalk.domain.analytics.payloads import VtprAnswerPayload
from smartalk.domain.analytics.services.event_sanitizer import EventSanitizer
from smartalk.domain.common.exceptions import ValidationError
from smartalk.domain.common.value_objects import UserId, ensure_utc
from smartalk.domain.identity.exceptions import UserNotFoundError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_BATCH_EVENTS = 100


@dataclass(frozen=True)
class _ValidatedEvent:
    user_id: UserId
    event: AnalyticsEvent


class EventIngestionUseCase:
    """
    Validates, sanitizes and appends client events.

    Validation happens before any write. Post-processing of stored events
    runs on the background dispatcher and never affects the caller.
    """

    def __init__(
        self,
        event_store: EventStoreProtocol,
        user_directory: UserDirectoryProtocol,
        sanitizer: EventSanitizer,
        dispatcher: BackgroundDispatcherProtocol,
        max_batch_events: int = DEFAULT_MAX_BATCH_EVENTS,
        activation_event: EventType = EventType.MAGIC_MOMENT_COMPLETE,
    ) -> None:
        self.event_store = event_store
        self.user_directory = user_directory
        self.sanitizer = sanitizer
        self.dispatcher = dispatcher
        self.max_batch_events = max_batch_events
        self.activation_event = activation_event

    def record_event(self, event_input: EventInput) -> AnalyticsEvent:
        """
        Record a single event.

        Args:
            event_input: Raw event from the client

        Returns:
            The stored event with its assigned ID

        Raises:
            ValidationError: If the event is malformed
            UserNotFoundError: If the user does not exist
            PersistenceError: If the event store fails
        """
        validated = self._validate(event_input)
        if not self.user_directory.exists(validated.user_id):
            raise UserNotFoundError(validated.user_id.value)

        event = validated.event
        event.id = self.event_store.append_event(event)

        logger.info(
            "analytics_event_recorded",
            event_id=event.id.value,
            user_id=event.user_id.value,
            event_type=event.event_type.value,
        )
        self._schedule_post_processing([event])
        return event

    def record_batch_events(self, event_inputs: Sequence[EventInput]) -> BatchIngestionResult:
        """
        Record a batch of events.

        The whole batch is validated first; a single malformed event rejects
        the batch before anything is written. Events of unknown users are then
        dropped individually and the rest is appended in one call.

        Args:
            event_inputs: Raw events from the client (1 to max_batch_events)

        Returns:
            BatchIngestionResult with the stored and dropped events

        Raises:
            ValidationError: If the batch size is wrong or any event is malformed
            PersistenceError: If the event store fails
        """
        if not event_inputs:
            raise ValidationError("Batch must contain at least one event", field="events")
        if len(event_inputs) > self.max_batch_events:
            raise ValidationError(
                f"Batch cannot contain more than {self.max_batch_events} events",
                field="events",
                value=len(event_inputs),
            )

        validated: list[_ValidatedEvent] = []
        errors: list[str] = []
        for index, event_input in enumerate(event_inputs):
            try:
                validated.append(self._validate(event_input))
            except ValidationError as e:
                errors.append(f"events[{index}]: {e.message}")
        if errors:
            raise ValidationError("Batch validation failed", field="events", errors=errors)

        known = self.user_directory.find_existing_ids(v.user_id for v in validated)
        result = BatchIngestionResult()
        to_store: list[AnalyticsEvent] = []
        for index, item in enumerate(validated):
            if item.user_id in known:
                to_store.append(item.event)
            else:
                result.dropped_indexes.append(index)

        if to_store:
            ids = self.event_store.append_events(to_store)
            for event, event_id in zip(to_store, ids, strict=True):
                event.id = event_id
            result.recorded.extend(to_store)

        if result.dropped_indexes:
            logger.warning(
                "batch_events_dropped_unknown_users",
                dropped=result.dropped_count,
                indexes=result.dropped_indexes,
            )
        logger.info(
            "analytics_batch_recorded",
            recorded=result.recorded_count,
            dropped=result.dropped_count,
        )
        self._schedule_post_processing(result.recorded)
        return result

    def _validate(self, event_input: EventInput) -> _ValidatedEvent:
        raw_user_id = event_input.user_id
        if isinstance(raw_user_id, bool) or not isinstance(raw_user_id, int) or raw_user_id < 1:
            raise ValidationError(
                "User ID must be a positive integer", field="user_id", value=raw_user_id
            )
        event_type = EventType.parse(event_input.event_type)

        data = event_input.event_data
        if data is not None and not isinstance(data, Mapping):
            raise ValidationError("Event data must be an object", field="event_data")

        user_id = UserId(raw_user_id)
        event = AnalyticsEvent.create(
            user_id=user_id,
            event_type=event_type,
            payload=self.sanitizer.sanitize(data),
            timestamp=ensure_utc(event_input.timestamp) if event_input.timestamp else None,
        )
        return _ValidatedEvent(user_id=user_id, event=event)

    def _schedule_post_processing(self, events: Sequence[AnalyticsEvent]) -> None:
        interesting = [
            e
            for e in events
            if e.event_type in (self.activation_event, EventType.VTPR_ANSWER_CORRECT)
        ]
        if not interesting:
            return
        self.dispatcher.dispatch(
            "analytics_post_processing", lambda: self._post_process(interesting)
        )

    def _post_process(self, events: Sequence[AnalyticsEvent]) -> None:
        for event in events:
            if event.event_type == self.activation_event:
                logger.info(
                    "user_activated",
                    user_id=event.user_id.value,
                    activated_at=event.timestamp.isoformat(),
                )
            elif event.event_type == EventType.VTPR_ANSWER_CORRECT:
                payload = event.typed_payload
                details: dict[str, Any] = {}
                if isinstance(payload, VtprAnswerPayload):
                    details = {"keyword_id": payload.keyword_id}
                logger.info("vtpr_answer_correct", user_id=event.user_id.value, **details)
