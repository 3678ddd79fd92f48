import hashlib
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog
from django.utils import timezone

from commentguard.moderation.domain.ports import ContentHashRepository
from commentguard.moderation.domain.types import PREVIEW_LENGTH

logger = structlog.get_logger(__name__)


def content_hash(content: str) -> str:
    return hashlib.sha256(content.strip().lower().encode("utf-8")).hexdigest()


class DuplicateDetector:
    """
    Detecta conteúdo idêntico repetido pelo mesmo usuário dentro de uma janela curta.

    A chave é (usuário, hash), então respostas curtas comuns vindas de
    usuários diferentes nunca colidem. Falhas de armazenamento não bloqueiam
    o envio: a detecção é um inibidor de flood, não uma barreira de segurança.
    """

    def __init__(
        self,
        repository: ContentHashRepository,
        window: timedelta = timedelta(minutes=15),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.window = window
        self.clock = clock or timezone.now

    def is_duplicate(self, user_id: str, content: str) -> bool:
        now = self.clock()
        digest = content_hash(content)

        try:
            previous = self.repository.touch(user_id, digest, content.strip()[:PREVIEW_LENGTH], now)
        except Exception as exc:
            logger.exception("duplicate_check_failed", user_id=user_id, error=str(exc))
            return False

        return previous is not None and previous >= now - self.window
