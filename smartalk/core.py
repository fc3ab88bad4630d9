from datetime import timedelta

from dependency_injector import containers, providers
from sqlalchemy.orm import Session

from smartalk.application.analytics.use_cases.event_ingestion_use_case import (
    EventIngestionUseCase,
)
from smartalk.application.analytics.use_cases.funnel_analytics_use_case import (
    FunnelAnalyticsUseCase,
)
from smartalk.application.analytics.use_cases.user_analytics_use_case import (
    UserAnalyticsUseCase,
)
from smartalk.application.common.locks import KeyedLockRegistry
from smartalk.application.learning.use_cases.learning_progress_use_case import (
    LearningProgressUseCase,
)
from smartalk.application.learning.use_cases.record_attempt_use_case import (
    RecordAttemptUseCase,
)
from smartalk.config import get_settings
from smartalk.database import get_session_factory
from smartalk.domain.analytics.services.event_sanitizer import EventSanitizer
from smartalk.domain.analytics.services.funnel_analyzer import FunnelAnalyzer
from smartalk.domain.learning.services.focus_mode import FocusModeController
from smartalk.domain.learning.services.milestone_detector import MilestoneDetector
from smartalk.domain.learning.services.session_tracker import LearningSessionTracker
from smartalk.infrastructure.analytics.repositories import EventRepository
from smartalk.infrastructure.common.background import ThreadPoolBackgroundDispatcher
from smartalk.infrastructure.identity.repositories import UserDirectoryRepository
from smartalk.infrastructure.learning.repositories import (
    ItemCatalogRepository,
    ProgressRepository,
)
from smartalk.infrastructure.learning.services.event_milestone_notifier import (
    EventMilestoneNotifier,
)


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    settings = providers.Singleton(get_settings)

    # Declare db as a dependency that will be provided at runtime
    db = providers.Dependency(instance_of=Session)

    # Sessions opened outside a request (background work)
    session_factory = providers.Callable(get_session_factory, settings=settings)

    # Repositories
    event_repository = providers.Factory(EventRepository, db=db)
    progress_repository = providers.Factory(ProgressRepository, db=db)
    item_catalog_repository = providers.Factory(ItemCatalogRepository, db=db)
    user_directory_repository = providers.Factory(UserDirectoryRepository, db=db)

    # Process-lifetime components
    event_sanitizer = providers.Singleton(EventSanitizer)
    funnel_analyzer = providers.Singleton(FunnelAnalyzer)
    focus_mode_controller = providers.Singleton(
        FocusModeController,
        trigger_threshold=settings.provided.FOCUS_MODE_TRIGGER_THRESHOLD,
    )
    session_tracker = providers.Singleton(LearningSessionTracker)
    milestone_detector = providers.Singleton(
        MilestoneDetector,
        perfect_streak_length=settings.provided.PERFECT_STREAK_LENGTH,
        speed_bonus_threshold=providers.Factory(
            timedelta, seconds=settings.provided.SPEED_BONUS_SECONDS
        ),
    )
    user_locks = providers.Singleton(KeyedLockRegistry)
    dispatcher = providers.Singleton(
        ThreadPoolBackgroundDispatcher,
        max_workers=settings.provided.BACKGROUND_WORKERS,
    )

    milestone_notifier = providers.Factory(
        EventMilestoneNotifier,
        session_factory=session_factory,
    )

    # Analytics module, application use cases
    event_ingestion_use_case = providers.Factory(
        EventIngestionUseCase,
        event_store=event_repository,
        user_directory=user_directory_repository,
        sanitizer=event_sanitizer,
        dispatcher=dispatcher,
        max_batch_events=settings.provided.MAX_BATCH_EVENTS,
        activation_event=settings.provided.ACTIVATION_EVENT_TYPE,
    )
    funnel_analytics_use_case = providers.Factory(
        FunnelAnalyticsUseCase,
        event_store=event_repository,
        user_directory=user_directory_repository,
        analyzer=funnel_analyzer,
        activation_event=settings.provided.ACTIVATION_EVENT_TYPE,
        session_start_event=settings.provided.SESSION_START_EVENT_TYPE,
    )
    user_analytics_use_case = providers.Factory(
        UserAnalyticsUseCase,
        event_store=event_repository,
        user_directory=user_directory_repository,
        analyzer=funnel_analyzer,
        learning_event_seconds=settings.provided.LEARNING_EVENT_SECONDS,
    )

    # Learning module use cases
    record_attempt_use_case = providers.Factory(
        RecordAttemptUseCase,
        progress_repository=progress_repository,
        item_catalog=item_catalog_repository,
        user_directory=user_directory_repository,
        focus_mode=focus_mode_controller,
        session_tracker=session_tracker,
        milestone_detector=milestone_detector,
        notifier=milestone_notifier,
        dispatcher=dispatcher,
        locks=user_locks,
        streak_threshold=settings.provided.STREAK_ACCURACY_THRESHOLD,
    )
    learning_progress_use_case = providers.Factory(
        LearningProgressUseCase,
        progress_repository=progress_repository,
        item_catalog=item_catalog_repository,
        user_directory=user_directory_repository,
        focus_mode=focus_mode_controller,
        session_tracker=session_tracker,
        locks=user_locks,
    )


# Initialize container
container = Container()
