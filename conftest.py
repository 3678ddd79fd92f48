import pytest
from rest_framework.test import APIClient

from commentguard.moderation.domain.config import ModerationConfig
from commentguard.moderation.infrastructure.word_cache import BlockedWordStore
from commentguard.moderation.services.duplicates import DuplicateDetector
from commentguard.moderation.services.engine import ModerationDecisionEngine
from commentguard.moderation.services.moderator import ModerationService
from commentguard.moderation.services.trust import TrustScoreService
from commentguard.moderation.tests.fakes import (
    InMemoryBlockedWordSource,
    InMemoryContentHashRepository,
    InMemoryModerationLogRepository,
    InMemoryTrustRepository,
    RecordingPublisher,
)

ADMIN_KEY = "test-admin-key"


@pytest.fixture(autouse=True)
def moderation_settings(settings):
    """Desliga a thread de recarga e isola o motor do processo entre os testes."""
    settings.MODERATION = {"AUTO_REFRESH_BLOCKED_WORDS": False}
    settings.MODERATION_ADMIN_KEY = ADMIN_KEY
    ModerationService.reset()
    yield
    ModerationService.reset()


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def admin_client() -> APIClient:
    client = APIClient()
    client.credentials(HTTP_X_ADMIN_KEY=ADMIN_KEY)
    return client


@pytest.fixture
def config() -> ModerationConfig:
    return ModerationConfig(auto_refresh_blocked_words=False)


@pytest.fixture
def word_source() -> InMemoryBlockedWordSource:
    return InMemoryBlockedWordSource({"idiot": "medium", "scum": "high", "darn": "low"})


@pytest.fixture
def trust_repository() -> InMemoryTrustRepository:
    return InMemoryTrustRepository()


@pytest.fixture
def hash_repository() -> InMemoryContentHashRepository:
    return InMemoryContentHashRepository()


@pytest.fixture
def log_repository() -> InMemoryModerationLogRepository:
    return InMemoryModerationLogRepository()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def engine(config, word_source, trust_repository, hash_repository, log_repository, publisher):
    """Motor completo sobre fakes em memória (sem banco)."""
    store = BlockedWordStore(word_source)
    store.load()
    return ModerationDecisionEngine(
        word_store=store,
        duplicate_detector=DuplicateDetector(hash_repository),
        trust_service=TrustScoreService(trust_repository, config),
        log_repository=log_repository,
        publisher=publisher,
        config=config,
    )
