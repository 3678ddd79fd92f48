import threading
from datetime import timedelta
from typing import Optional

import structlog

from commentguard.moderation.domain.config import ModerationConfig
from commentguard.moderation.domain.types import ModerationVerdict
from commentguard.moderation.infrastructure.events import CeleryDecisionPublisher
from commentguard.moderation.infrastructure.repositories import (
    DjangoBlockedWordSource,
    DjangoContentHashRepository,
    DjangoModerationLogRepository,
    DjangoTrustRepository,
)
from commentguard.moderation.infrastructure.word_cache import BlockedWordStore
from commentguard.moderation.services.duplicates import DuplicateDetector
from commentguard.moderation.services.engine import SERVICE_ERROR, ModerationDecisionEngine
from commentguard.moderation.services.trust import TrustScoreService

logger = structlog.get_logger(__name__)


def build_engine(config: Optional[ModerationConfig] = None) -> ModerationDecisionEngine:
    """Monta o motor com os adaptadores Django/Celery e carrega as palavras bloqueadas."""
    config = config or ModerationConfig.from_settings()

    word_store = BlockedWordStore(DjangoBlockedWordSource(), refresh_interval=config.blocked_words_refresh_seconds)
    word_store.load()
    if config.auto_refresh_blocked_words:
        word_store.start_auto_refresh()

    return ModerationDecisionEngine(
        word_store=word_store,
        duplicate_detector=DuplicateDetector(
            DjangoContentHashRepository(), window=timedelta(minutes=config.duplicate_window_minutes)
        ),
        trust_service=TrustScoreService(DjangoTrustRepository(), config),
        log_repository=DjangoModerationLogRepository(),
        publisher=CeleryDecisionPublisher(),
        config=config,
    )


class ModerationService:
    """
    Application Service: ponto de entrada único da moderação.

    Responsabilidades:
    - Manter uma instância do motor por processo (com seu cache de palavras)
    - Expor a moderação para a API e demais colaboradores
    - Garantir falha fechada caso o próprio motor não possa ser montado
    """

    _engine: Optional[ModerationDecisionEngine] = None
    _lock = threading.Lock()

    @classmethod
    def get_engine(cls) -> ModerationDecisionEngine:
        if cls._engine is None:
            with cls._lock:
                if cls._engine is None:
                    cls._engine = build_engine()
        return cls._engine

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            if cls._engine is not None:
                cls._engine.word_store.stop_auto_refresh()
            cls._engine = None

    @classmethod
    def moderate(cls, content: str, user_id: Optional[str] = None, page_id: Optional[str] = None) -> ModerationVerdict:
        """
        Modera um comentário usando o motor do processo.

        Args:
            content: Texto do comentário
            user_id: Autor do comentário (opcional)
            page_id: Página do comentário (opcional)

        Returns:
            ModerationVerdict; em caso de falha ao montar o motor, rejeição
            com "Moderation service error"
        """
        try:
            engine = cls.get_engine()
        except Exception as exc:
            logger.exception("moderation_engine_unavailable", error=str(exc))
            return ModerationVerdict.reject(SERVICE_ERROR, 1.0, hard_rule=True)

        return engine.moderate(content, user_id=user_id, page_id=page_id)

    @classmethod
    def reload_blocked_words(cls) -> None:
        if cls._engine is not None:
            cls._engine.word_store.load()

    @classmethod
    def trust_service(cls) -> TrustScoreService:
        return cls.get_engine().trust_service
