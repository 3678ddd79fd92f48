from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from commentguard.moderation.domain.types import (
    BlockedWordEntry,
    ModerationDecided,
    ModerationLogEntry,
    TrustRecord,
)


class BlockedWordSource(ABC):
    """
    Contrato de leitura da lista de palavras bloqueadas.

    Permite trocar a origem (banco, arquivo, fake de teste) sem afetar o
    cache mantido pelo motor de moderação.
    """

    @abstractmethod
    def list_active(self) -> list[BlockedWordEntry]:
        """Retorna todas as palavras ativas com sua severidade."""
        pass


class TrustRepository(ABC):
    """
    Contrato de persistência da reputação dos usuários.

    `update` deve executar leitura e escrita de forma atômica por usuário
    (lock de linha ou equivalente) para não perder incrementos concorrentes.
    """

    @abstractmethod
    def get(self, user_id: str) -> Optional[TrustRecord]:
        pass

    @abstractmethod
    def get_or_create(self, user_id: str, default_score: float) -> TrustRecord:
        pass

    @abstractmethod
    def update(
        self, user_id: str, mutate: Callable[[TrustRecord], TrustRecord], default_score: float
    ) -> TrustRecord:
        """
        Aplica `mutate` ao registro atual (criando-o se necessário) e persiste o resultado.

        Args:
            user_id: Identificador do usuário
            mutate: Função pura que recebe o registro atual e devolve o novo
            default_score: Score usado se o registro ainda não existir

        Returns:
            TrustRecord persistido
        """
        pass

    @abstractmethod
    def list_top(self, limit: int, min_comments: int) -> list[TrustRecord]:
        pass

    @abstractmethod
    def list_below(self, threshold: float, limit: int) -> list[TrustRecord]:
        pass


class ContentHashRepository(ABC):
    """Contrato de armazenamento dos hashes usados na detecção de duplicados."""

    @abstractmethod
    def touch(self, user_id: str, content_hash: str, preview: str, seen_at: datetime) -> Optional[datetime]:
        """
        Registra uma ocorrência do hash para o usuário.

        Cria o registro se não existir; caso exista, incrementa o contador e
        atualiza `last_seen` para `seen_at`.

        Returns:
            O `last_seen` anterior, ou None se o registro acabou de ser criado
        """
        pass


class ModerationLogRepository(ABC):
    @abstractmethod
    def append(self, entry: ModerationLogEntry) -> None:
        pass


class DecisionPublisher(ABC):
    """Destino dos eventos `ModerationDecided` (atualização assíncrona de confiança)."""

    @abstractmethod
    def publish(self, event: ModerationDecided) -> None:
        pass
