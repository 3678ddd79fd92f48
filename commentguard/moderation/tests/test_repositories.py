from dataclasses import replace
from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.utils import timezone
from model_bakery import baker

from commentguard.moderation.domain.types import ModerationLogEntry, ModerationScores, ModerationVerdict
from commentguard.moderation.infrastructure.repositories import (
    DjangoBlockedWordSource,
    DjangoContentHashRepository,
    DjangoModerationLogRepository,
    DjangoTrustRepository,
)
from commentguard.moderation.models import BlockedWord, ContentHash, ModerationLog, TrustRecord


@pytest.mark.integration
@pytest.mark.django_db
class TestBlockedWordModel:
    def test_word_is_normalized_on_save(self):
        word = BlockedWord.objects.create(word="  SpAm ", severity=BlockedWord.Severity.LOW)

        assert word.word == "spam"

    @pytest.mark.parametrize("value", ["son of a", "f-off", "don't"])
    def test_clean_rejects_multi_token_words(self, value):
        with pytest.raises(ValidationError) as excinfo:
            BlockedWord(word=value).full_clean()

        assert "word" in excinfo.value.message_dict

    def test_clean_accepts_single_word(self):
        BlockedWord(word="scum_bag", severity=BlockedWord.Severity.HIGH).full_clean()

    def test_source_lists_only_active_words(self):
        baker.make(BlockedWord, word="active", severity="high", is_active=True)
        baker.make(BlockedWord, word="inactive", severity="high", is_active=False)

        entries = DjangoBlockedWordSource().list_active()

        assert [(e.word, e.severity) for e in entries] == [("active", "high")]


@pytest.mark.integration
@pytest.mark.django_db
class TestDjangoTrustRepository:
    def test_get_or_create_is_lazy(self):
        repository = DjangoTrustRepository()

        assert repository.get("u1") is None
        record = repository.get_or_create("u1", 0.5)

        assert record.trust_score == 0.5
        assert TrustRecord.objects.filter(user_id="u1").count() == 1

    def test_update_persists_mutation(self):
        repository = DjangoTrustRepository()

        record = repository.update(
            "u1", lambda r: replace(r, total_comments=3, flagged_comments=1, trust_score=0.42), 0.5
        )

        row = TrustRecord.objects.get(user_id="u1")
        assert (row.total_comments, row.flagged_comments, row.trust_score) == (3, 1, 0.42)
        assert record.updated_at is not None

    def test_flagged_cannot_exceed_total(self):
        with pytest.raises(IntegrityError):
            TrustRecord.objects.create(user_id="broken", total_comments=1, flagged_comments=2)

    def test_list_top_and_below(self):
        baker.make(TrustRecord, user_id="veteran", trust_score=0.9, total_comments=30)
        baker.make(TrustRecord, user_id="regular", trust_score=0.7, total_comments=8)
        baker.make(TrustRecord, user_id="newbie", trust_score=1.0, total_comments=1)
        baker.make(TrustRecord, user_id="troll", trust_score=0.12, total_comments=9, flagged_comments=9)

        repository = DjangoTrustRepository()

        assert [r.user_id for r in repository.list_top(limit=10, min_comments=5)] == ["veteran", "regular", "troll"]
        assert [r.user_id for r in repository.list_top(limit=1, min_comments=5)] == ["veteran"]
        assert [r.user_id for r in repository.list_below(threshold=0.3, limit=20)] == ["troll"]


@pytest.mark.integration
@pytest.mark.django_db
class TestDjangoContentHashRepository:
    def test_touch_creates_then_increments(self):
        repository = DjangoContentHashRepository()
        first_seen = timezone.now()
        later = first_seen + timedelta(minutes=3)

        assert repository.touch("u1", "a" * 64, "Nice post", first_seen) is None
        assert repository.touch("u1", "a" * 64, "Nice post", later) == first_seen

        row = ContentHash.objects.get(user_id="u1", content_hash="a" * 64)
        assert row.occurrence_count == 2
        assert row.first_seen == first_seen
        assert row.last_seen == later

    def test_hashes_are_scoped_per_user(self):
        repository = DjangoContentHashRepository()
        now = timezone.now()

        repository.touch("u1", "b" * 64, "hi", now)

        assert repository.touch("u2", "b" * 64, "hi", now) is None
        assert ContentHash.objects.count() == 2


@pytest.mark.integration
@pytest.mark.django_db
class TestDjangoModerationLogRepository:
    def test_append(self):
        verdict = ModerationVerdict.reject(
            "Contains prohibited language",
            0.9,
            flagged_words=["scum"],
            scores=ModerationScores(spam=0.15, sentiment=-1.0, caps_ratio=0.1, link_count=0, user_trust=0.4),
        )

        DjangoModerationLogRepository().append(
            ModerationLogEntry.from_verdict("you are scum", verdict, user_id="u1", page_id="p1")
        )

        log = ModerationLog.objects.get()
        assert log.approved is False
        assert log.reason == "Contains prohibited language"
        assert log.flagged_words == ["scum"]
        assert (log.user_id, log.page_id) == ("u1", "p1")
        assert log.spam_score == 0.15
        assert log.user_trust == 0.4
