from datetime import datetime
from typing import Callable, Optional

from django.db import IntegrityError, transaction

from commentguard.moderation.domain.ports import (
    BlockedWordSource,
    ContentHashRepository,
    ModerationLogRepository,
    TrustRepository,
)
from commentguard.moderation.domain.types import BlockedWordEntry, ModerationLogEntry, TrustRecord
from commentguard.moderation.models import BlockedWord, ContentHash, ModerationLog
from commentguard.moderation.models import TrustRecord as TrustRecordModel

_TRUST_FIELDS = ["trust_score", "total_comments", "flagged_comments", "helpful_reports", "false_reports"]


def _to_trust_record(row: TrustRecordModel) -> TrustRecord:
    return TrustRecord(
        user_id=row.user_id,
        trust_score=row.trust_score,
        total_comments=row.total_comments,
        flagged_comments=row.flagged_comments,
        helpful_reports=row.helpful_reports,
        false_reports=row.false_reports,
        updated_at=row.updated_at,
    )


class DjangoBlockedWordSource(BlockedWordSource):
    def list_active(self) -> list[BlockedWordEntry]:
        rows = BlockedWord.objects.filter(is_active=True).values_list("word", "severity")
        return [BlockedWordEntry(word=word, severity=severity) for word, severity in rows]


class DjangoTrustRepository(TrustRepository):
    """
    Repositório de confiança sobre o ORM.

    Escritas usam `select_for_update` dentro de `transaction.atomic`,
    serializando atualizações concorrentes do mesmo usuário.
    """

    def get(self, user_id: str) -> Optional[TrustRecord]:
        row = TrustRecordModel.objects.filter(user_id=user_id).first()
        return _to_trust_record(row) if row else None

    def get_or_create(self, user_id: str, default_score: float) -> TrustRecord:
        row, _ = TrustRecordModel.objects.get_or_create(user_id=user_id, defaults={"trust_score": default_score})
        return _to_trust_record(row)

    def update(
        self, user_id: str, mutate: Callable[[TrustRecord], TrustRecord], default_score: float
    ) -> TrustRecord:
        with transaction.atomic():
            row, _ = TrustRecordModel.objects.select_for_update().get_or_create(
                user_id=user_id, defaults={"trust_score": default_score}
            )
            updated = mutate(_to_trust_record(row))

            for field in _TRUST_FIELDS:
                setattr(row, field, getattr(updated, field))
            row.save(update_fields=[*_TRUST_FIELDS, "updated_at"])

        return _to_trust_record(row)

    def list_top(self, limit: int, min_comments: int) -> list[TrustRecord]:
        rows = TrustRecordModel.objects.filter(total_comments__gt=min_comments).order_by("-trust_score")[:limit]
        return [_to_trust_record(row) for row in rows]

    def list_below(self, threshold: float, limit: int) -> list[TrustRecord]:
        rows = TrustRecordModel.objects.filter(trust_score__lt=threshold, total_comments__gt=0).order_by(
            "trust_score"
        )[:limit]
        return [_to_trust_record(row) for row in rows]


class DjangoContentHashRepository(ContentHashRepository):
    def touch(self, user_id: str, content_hash: str, preview: str, seen_at: datetime) -> Optional[datetime]:
        with transaction.atomic():
            row = ContentHash.objects.select_for_update().filter(user_id=user_id, content_hash=content_hash).first()

            if row is None:
                try:
                    with transaction.atomic():
                        ContentHash.objects.create(
                            user_id=user_id,
                            content_hash=content_hash,
                            preview=preview,
                            first_seen=seen_at,
                            last_seen=seen_at,
                        )
                    return None
                except IntegrityError:
                    # Outra requisição do mesmo usuário criou o registro primeiro.
                    row = ContentHash.objects.select_for_update().get(user_id=user_id, content_hash=content_hash)

            previous = row.last_seen
            row.occurrence_count += 1
            row.last_seen = seen_at
            row.preview = preview
            row.save(update_fields=["occurrence_count", "last_seen", "preview", "updated_at"])

        return previous


class DjangoModerationLogRepository(ModerationLogRepository):
    def append(self, entry: ModerationLogEntry) -> None:
        ModerationLog.objects.create(
            content=entry.content,
            approved=entry.approved,
            reason=entry.reason,
            confidence=entry.confidence,
            flagged_words=entry.flagged_words,
            user_id=entry.user_id,
            page_id=entry.page_id,
            spam_score=entry.scores.spam,
            sentiment_score=entry.scores.sentiment,
            toxicity_score=entry.scores.toxicity,
            caps_ratio=entry.scores.caps_ratio,
            link_count=entry.scores.link_count,
            user_trust=entry.scores.user_trust,
        )
