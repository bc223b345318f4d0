"""
Dependency Injection Container.

This module provides a centralized container for managing service dependencies
across the application. It ensures singletons for shared resources like
the form repository and the submission store.

The container pattern enables:
- Centralized dependency management
- Easy testing with mock collaborators
- Lazy initialization from settings

Example:
    from riskintake.services.container import get_container

    container = get_container()
    result = await container.scoring_service.score_submission("tracs_rif", "sub-001")
"""

from functools import lru_cache
from typing import Optional

from engines.form_definition import FormDefinition
from engines.rif_scorer import RIFScorer
from riskintake.core.cache import TTLCache
from riskintake.core.config import Settings, get_settings
from riskintake.core.logging import ScoringLogger
from riskintake.services.collaborators import FormStore
from riskintake.services.form_repository import JsonFormRepository
from riskintake.services.scoring_service import ScoringService
from riskintake.services.submission_store import InMemorySubmissionStore


class DependencyContainer:
    """
    Centralized container for application dependencies.

    Attributes:
        _settings: Settings used to build services.
        _scorer: Cached RIFScorer built from the configured thresholds.
        _form_store: Cached form store (JSON repository unless overridden).
        _submission_store: Cached answer store and score sink.
        _scoring_service: Cached ScoringService wired to the above.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the container with lazy service references."""
        self._settings = settings
        self._scorer: Optional[RIFScorer] = None
        self._form_store: Optional[FormStore] = None
        self._submission_store: Optional[InMemorySubmissionStore] = None
        self._scoring_service: Optional[ScoringService] = None
        self._logger: Optional[ScoringLogger] = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def logger(self) -> ScoringLogger:
        if self._logger is None:
            self._logger = ScoringLogger("service")
        return self._logger

    @property
    def scorer(self) -> RIFScorer:
        """
        Get the RIFScorer instance.

        Raises:
            InvalidThresholdsError: Configured thresholds are inconsistent.
        """
        if self._scorer is None:
            self._scorer = RIFScorer.from_values(
                medium_threshold=self.settings.risk_medium_threshold,
                high_threshold=self.settings.risk_high_threshold,
                section_alert_percentage=self.settings.section_alert_percentage,
            )
        return self._scorer

    @property
    def form_store(self) -> FormStore:
        if self._form_store is None:
            cache: TTLCache[FormDefinition] = TTLCache(
                ttl_seconds=self.settings.cache_ttl_seconds,
                max_size=self.settings.cache_max_size,
            )
            self._form_store = JsonFormRepository(self.settings.forms_dir, cache=cache)
        return self._form_store

    @property
    def submission_store(self) -> InMemorySubmissionStore:
        if self._submission_store is None:
            self._submission_store = InMemorySubmissionStore()
        return self._submission_store

    @property
    def scoring_service(self) -> ScoringService:
        """
        Get the ScoringService instance.

        The submission store serves as both answer store and score sink.
        """
        if self._scoring_service is None:
            self._scoring_service = ScoringService(
                form_store=self.form_store,
                answer_store=self.submission_store,
                result_sink=self.submission_store,
                scorer=self.scorer,
                logger=self.logger,
            )
        return self._scoring_service

    def reset(self) -> None:
        """
        Reset all cached services.

        Useful for testing to ensure fresh instances.
        """
        self._scorer = None
        self._form_store = None
        self._submission_store = None
        self._scoring_service = None
        self._logger = None

    def override_form_store(self, form_store: FormStore) -> None:
        """
        Override the form store with a mock.

        Args:
            form_store: Object with an async ``load_form_definition``.
        """
        self._form_store = form_store
        # Reset service to pick up the new store
        self._scoring_service = None

    def override_submission_store(self, store: InMemorySubmissionStore) -> None:
        self._submission_store = store
        self._scoring_service = None


@lru_cache(maxsize=1)
def get_container() -> DependencyContainer:
    """
    Get the singleton DependencyContainer instance.

    Uses lru_cache to ensure only one container exists per process.
    """
    return DependencyContainer()


def reset_container() -> None:
    """
    Reset the global container singleton.

    Clears the lru_cache and allows a fresh container to be created.
    Useful for testing isolation.
    """
    get_container.cache_clear()
