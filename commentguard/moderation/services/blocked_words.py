from typing import Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Case, IntegerField, Value, When

from commentguard.moderation.domain.text import is_single_token
from commentguard.moderation.domain.types import SEVERITY_RANK
from commentguard.moderation.models import SINGLE_WORD_MESSAGE, BlockedWord
from commentguard.moderation.services.moderator import ModerationService

logger = structlog.get_logger(__name__)


class BlockedWordService:
    """Service para administração da lista de palavras bloqueadas."""

    @staticmethod
    def add_word(word: str, severity: str = BlockedWord.Severity.MEDIUM, category: str = "general") -> BlockedWord:
        """
        Cria ou atualiza uma palavra bloqueada e recarrega o cache do motor.

        Args:
            word: Palavra (normalizada para minúsculas)
            severity: Severidade (low, medium, high, critical)
            category: Categoria livre para organização

        Returns:
            BlockedWord: Registro criado ou atualizado
        """
        word = word.strip().lower()
        if not is_single_token(word):
            raise ValidationError({"word": SINGLE_WORD_MESSAGE})

        blocked_word, created = BlockedWord.objects.update_or_create(
            word=word,
            defaults={"severity": severity, "category": category, "is_active": True},
        )
        logger.info("blocked_word_saved", word=blocked_word.word, severity=severity, created=created)

        transaction.on_commit(ModerationService.reload_blocked_words)
        return blocked_word

    @staticmethod
    def remove_word(word_id) -> Optional[BlockedWord]:
        blocked_word = BlockedWord.objects.filter(pk=word_id).first()
        if blocked_word is None:
            return None

        blocked_word.delete()
        logger.info("blocked_word_removed", word=blocked_word.word)

        transaction.on_commit(ModerationService.reload_blocked_words)
        return blocked_word

    @staticmethod
    def list_words():
        rank = Case(
            *[When(severity=severity, then=Value(value)) for severity, value in SEVERITY_RANK.items()],
            default=Value(0),
            output_field=IntegerField(),
        )
        return BlockedWord.objects.annotate(severity_rank=rank).order_by("-severity_rank", "word")
