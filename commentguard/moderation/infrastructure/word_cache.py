import threading
import time
from types import MappingProxyType
from typing import Mapping, Optional

import structlog
from django.db import close_old_connections

from commentguard.moderation.domain.ports import BlockedWordSource
from commentguard.moderation.domain.types import SEVERITY_RANK

logger = structlog.get_logger(__name__)


class BlockedWordStore:
    """
    Cache em memória das palavras bloqueadas (palavra minúscula -> severidade).

    O mapa é imutável e substituído por inteiro a cada recarga; leitores
    concorrentes sempre enxergam o mapa antigo ou o novo, nunca um parcial.
    Falhas na recarga mantêm o mapa anterior.
    """

    def __init__(self, source: BlockedWordSource, refresh_interval: float = 60.0):
        self.source = source
        self.refresh_interval = refresh_interval
        self._words: Mapping[str, str] = MappingProxyType({})
        self._last_loaded_at: Optional[float] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def size(self) -> int:
        return len(self._words)

    @property
    def last_loaded_at(self) -> Optional[float]:
        return self._last_loaded_at

    def load(self) -> bool:
        """
        Recarrega o mapa a partir da fonte.

        Returns:
            True se o mapa foi substituído, False se a recarga falhou
        """
        try:
            entries = self.source.list_active()
            words = {entry.word.strip().lower(): entry.severity for entry in entries}
        except Exception as exc:
            logger.exception("blocked_words_load_failed", error=str(exc), kept=len(self._words))
            return False

        self._words = MappingProxyType(words)
        self._last_loaded_at = time.time()
        logger.info("blocked_words_loaded", count=len(words))
        return True

    def lookup(self, token: str) -> Optional[str]:
        return self._words.get(token.lower())

    @staticmethod
    def severity_rank(severity: Optional[str]) -> int:
        return SEVERITY_RANK.get(severity or "", 0)

    def start_auto_refresh(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._refresh_loop, name="blocked-words-refresh", daemon=True)
        self._thread.start()

    def stop_auto_refresh(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=1)
        self._thread = None

    def _refresh_loop(self) -> None:
        while not self._stop_event.wait(self.refresh_interval):
            # A thread mantém conexão própria com o banco; descarta se estiver inutilizável.
            close_old_connections()
            self.load()
