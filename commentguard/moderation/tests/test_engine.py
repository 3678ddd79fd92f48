from dataclasses import replace

import pytest

from commentguard.moderation.infrastructure.word_cache import BlockedWordStore
from commentguard.moderation.services import engine as engine_module
from commentguard.moderation.services.duplicates import DuplicateDetector
from commentguard.moderation.services.engine import (
    CONTENT_TOO_LONG,
    CONTENT_TOO_SHORT,
    DETECTED_AS_SPAM,
    EMBEDDED_CODE,
    EMPTY_CONTENT,
    EXCESSIVE_CAPS,
    EXCESSIVE_REPETITION,
    EXTERNAL_LINKS,
    EXTREMELY_NEGATIVE,
    PROHIBITED_LANGUAGE,
    SERVICE_ERROR,
    TOO_MANY_LINKS,
    ModerationDecisionEngine,
)
from commentguard.moderation.services.trust import TrustScoreService

# Média -17/5 = -3.4: abaixo do limiar de sentimento, com confiança 0.68.
MILDLY_HOSTILE = "bastard awful liar bad ugly"


def build(config, word_source, trust_repository, hash_repository, log_repository, publisher):
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


@pytest.mark.unit
class TestValidation:
    @pytest.mark.parametrize("content", ["", "   \n\t", None])
    def test_empty_content(self, engine, content):
        verdict = engine.moderate(content, user_id="u1")

        assert verdict.approved is False
        assert verdict.reason == EMPTY_CONTENT
        assert verdict.confidence == 1.0

    def test_content_too_long(self, engine, log_repository):
        verdict = engine.moderate("a" * 5001, user_id="u1")

        assert verdict.reason == CONTENT_TOO_LONG
        assert len(log_repository.entries[0].content) == 5000

    def test_content_at_max_length_passes_validation(self, engine):
        assert engine.moderate("ab " * 1666 + "ab", user_id="u1").reason != CONTENT_TOO_LONG

    def test_content_too_short(self, config, word_source, trust_repository, hash_repository, log_repository, publisher):
        config = replace(config, min_comment_length=5)
        engine = build(config, word_source, trust_repository, hash_repository, log_repository, publisher)

        assert engine.moderate("  hi  ", user_id="u1").reason == CONTENT_TOO_SHORT

    def test_validation_rejections_do_not_touch_trust(self, engine, publisher, log_repository, hash_repository):
        engine.moderate("", user_id="u1")
        engine.moderate("x" * 6000, user_id="u1")

        assert publisher.events == []
        assert hash_repository.seen == {}
        assert len(log_repository.entries) == 2


@pytest.mark.unit
class TestDecisions:
    def test_clean_comment_is_approved(self, engine, publisher, log_repository):
        verdict = engine.moderate("Great article, thanks for sharing!", user_id="u1", page_id="p1")

        assert verdict.approved is True
        assert verdict.reason is None
        assert verdict.confidence == 1.0
        assert verdict.flagged_words == []
        assert verdict.scores.sentiment > 0
        assert verdict.scores.user_trust == 0.5

        [event] = publisher.events
        assert (event.user_id, event.page_id, event.approved) == ("u1", "p1", True)

        [entry] = log_repository.entries
        assert entry.approved is True
        assert entry.page_id == "p1"

    def test_duplicate_from_same_user(self, engine):
        assert engine.moderate("Nice post", user_id="u1").approved is True

        verdict = engine.moderate("Nice post", user_id="u1")

        assert verdict.approved is False
        assert verdict.reason == (
            "Duplicate content detected. Please wait 15 minutes before posting the same comment again."
        )
        assert verdict.confidence == 1.0

    def test_same_content_from_another_user_is_not_duplicate(self, engine):
        engine.moderate("Nice post", user_id="u1")

        assert engine.moderate("Nice post", user_id="u2").approved is True

    def test_anonymous_submissions_skip_duplicates_and_events(self, engine, publisher, hash_repository):
        engine.moderate("Nice post")
        verdict = engine.moderate("Nice post")

        assert verdict.approved is True
        assert hash_repository.seen == {}
        assert publisher.events == []

    def test_embedded_code_is_rejected_even_for_trusted_users(self, engine, trust_repository, publisher):
        trust_repository.put("trusted", trust_score=0.95, total_comments=50)

        verdict = engine.moderate("<script>alert(1)</script>", user_id="trusted")

        assert verdict.approved is False
        assert verdict.reason == EMBEDDED_CODE
        assert verdict.confidence == 1.0
        assert publisher.events[0].approved is False

    def test_plain_link_is_rejected(self, engine):
        verdict = engine.moderate("Check https://spam.example.com now", user_id="u1")

        assert verdict.approved is False
        assert verdict.reason == EXTERNAL_LINKS
        assert verdict.confidence == 0.9
        assert verdict.scores.link_count == 1

    def test_markdown_image_passes_link_rule(self, engine):
        verdict = engine.moderate("Look at this ![cat](https://img.example.com/cat.png)", user_id="u1")

        assert verdict.approved is True

    def test_missing_space_after_period_is_not_a_link(self, engine):
        verdict = engine.moderate("I agree.It is a fine article", user_id="u1")

        assert verdict.approved is True
        assert verdict.reason is None

    def test_bare_domain_tlds_come_from_config(
        self, config, word_source, trust_repository, hash_repository, log_repository, publisher
    ):
        config = replace(config, link_tlds=("de",))
        engine = build(config, word_source, trust_repository, hash_repository, log_repository, publisher)

        assert engine.moderate("buy at shop.de today", user_id="u1").reason == EXTERNAL_LINKS
        assert engine.moderate("read example.com later", user_id="u2").approved is True

    def test_link_budget_mode(self, config, word_source, trust_repository, hash_repository, log_repository, publisher):
        config = replace(config, link_budget_mode=True, max_links_allowed=2)
        engine = build(config, word_source, trust_repository, hash_repository, log_repository, publisher)

        two = "see https://a.example.com and https://b.example.com"
        three = two + " or https://c.example.com"

        assert engine.moderate(two, user_id="u1").approved is True
        verdict = engine.moderate(three, user_id="u2")
        assert verdict.reason == TOO_MANY_LINKS
        assert verdict.scores.link_count == 3

    def test_blocked_words_over_weight_are_rejected(self, engine):
        verdict = engine.moderate("you are scum", user_id="u1")

        assert verdict.approved is False
        assert verdict.reason == PROHIBITED_LANGUAGE
        assert verdict.confidence == 0.9
        assert verdict.flagged_words == ["scum"]

    def test_blocked_word_weights_add_up(self, engine):
        verdict = engine.moderate("idiot and idiot again", user_id="u1")

        assert verdict.reason == PROHIBITED_LANGUAGE
        assert verdict.flagged_words == ["idiot", "idiot"]

    def test_low_weight_blocked_word_is_flagged_but_approved(self, engine):
        verdict = engine.moderate("darn, that was close", user_id="u1")

        assert verdict.approved is True
        assert verdict.flagged_words == ["darn"]

    def test_spam_is_rejected_with_score_as_confidence(self, engine):
        verdict = engine.moderate("Click here, buy now, limited offer, act now. Call 555-123-4567", user_id="u1")

        assert verdict.approved is False
        assert verdict.reason == DETECTED_AS_SPAM
        assert verdict.confidence == verdict.scores.spam == 1.0

    def test_extremely_negative_content(self, engine):
        verdict = engine.moderate(MILDLY_HOSTILE, user_id="u1")

        assert verdict.reason == EXTREMELY_NEGATIVE
        assert verdict.scores.sentiment == pytest.approx(-3.4)
        assert verdict.confidence == pytest.approx(0.68)
        assert verdict.scores.toxicity == pytest.approx(0.68)

    def test_all_caps_from_new_user(self, engine):
        verdict = engine.moderate("THIS IS ABSOLUTELY UNACCEPTABLE", user_id="new-user")

        assert verdict.approved is False
        assert verdict.reason == EXCESSIVE_CAPS
        assert verdict.confidence == 0.8
        assert verdict.scores.caps_ratio == 1.0

    def test_short_caps_are_allowed(self, engine):
        assert engine.moderate("OK THANKS", user_id="u1").approved is True

    def test_excessive_repetition(self, engine):
        verdict = engine.moderate("Sooooo nice", user_id="u1")

        assert verdict.reason == EXCESSIVE_REPETITION
        assert verdict.confidence == 0.85


@pytest.mark.unit
class TestTrustOverride:
    def test_trusted_user_overrides_low_confidence_rejection(self, engine, trust_repository, publisher):
        trust_repository.put("trusted", trust_score=0.95, total_comments=50)

        verdict = engine.moderate(MILDLY_HOSTILE, user_id="trusted")

        assert verdict.approved is True
        assert verdict.reason is None
        assert verdict.flagged_words == []
        assert verdict.scores.user_trust == 0.95
        assert publisher.events[0].approved is True

    def test_caps_rejection_is_not_overridden(self, engine, trust_repository):
        trust_repository.put("trusted", trust_score=0.95, total_comments=50)

        verdict = engine.moderate("THIS IS ABSOLUTELY UNACCEPTABLE", user_id="trusted")

        assert verdict.approved is False
        assert verdict.reason == EXCESSIVE_CAPS

    def test_user_at_threshold_is_not_trusted(self, engine, trust_repository):
        trust_repository.put("borderline", trust_score=0.8, total_comments=50)

        assert engine.moderate(MILDLY_HOSTILE, user_id="borderline").approved is False

    def test_override_ceiling_is_configurable(
        self, config, word_source, trust_repository, hash_repository, log_repository, publisher
    ):
        config = replace(config, trust_override_max_confidence=0.95)
        engine = build(config, word_source, trust_repository, hash_repository, log_repository, publisher)
        trust_repository.put("trusted", trust_score=0.95, total_comments=50)

        assert engine.moderate("THIS IS ABSOLUTELY UNACCEPTABLE", user_id="trusted").approved is True
        assert engine.moderate("Check https://spam.example.com now", user_id="trusted").approved is False


@pytest.mark.unit
class TestFailureHandling:
    def test_signal_failure_uses_neutral_default(self, engine, trust_repository, monkeypatch):
        def broken(*args, **kwargs):
            raise ConnectionError("trust storage unavailable")

        monkeypatch.setattr(trust_repository, "get_or_create", broken)

        verdict = engine.moderate("Great article, thanks for sharing!", user_id="u1")

        assert verdict.approved is True
        assert verdict.scores.user_trust == 0.5

    def test_duplicate_storage_failure_fails_open(self, engine, hash_repository):
        hash_repository.fail = True

        engine.moderate("Nice post", user_id="u1")
        assert engine.moderate("Nice post", user_id="u1").approved is True

    def test_blocked_word_failure_flags_nothing(self, engine, monkeypatch):
        def broken(token):
            raise RuntimeError("cache corrupted")

        monkeypatch.setattr(engine.word_store, "lookup", broken)

        verdict = engine.moderate("you are scum", user_id="u1")

        assert verdict.approved is True
        assert verdict.flagged_words == []

    def test_unexpected_failure_fails_closed(self, engine, publisher, log_repository, monkeypatch):
        def broken(content):
            raise RuntimeError("tokenizer exploded")

        monkeypatch.setattr(engine_module, "tokenize", broken)

        verdict = engine.moderate("Great article", user_id="u1")

        assert verdict.approved is False
        assert verdict.reason == SERVICE_ERROR
        assert verdict.confidence == 1.0
        assert publisher.events == []
        assert log_repository.entries[0].reason == SERVICE_ERROR

    def test_log_failure_does_not_change_verdict(self, engine, log_repository):
        log_repository.fail = True

        assert engine.moderate("Great article, thanks for sharing!", user_id="u1").approved is True

    def test_publish_failure_does_not_reach_caller(self, engine, publisher, monkeypatch):
        def broken(event):
            raise ConnectionError("broker down")

        monkeypatch.setattr(publisher, "publish", broken)

        assert engine.moderate("Great article, thanks for sharing!", user_id="u1").approved is True


@pytest.mark.unit
class TestVerdictShape:
    def test_to_dict(self, engine):
        data = engine.moderate("you are scum", user_id="u1").to_dict()

        assert set(data) == {"approved", "reason", "confidence", "flaggedWords", "scores"}
        assert set(data["scores"]) == {"spam", "sentiment", "toxicity", "capsRatio", "linkCount", "userTrust"}
        assert data["flaggedWords"] == ["scum"]

    def test_analysis_is_deterministic(self, engine):
        first = engine.moderate("THIS IS ABSOLUTELY UNACCEPTABLE")
        second = engine.moderate("THIS IS ABSOLUTELY UNACCEPTABLE")

        assert first.to_dict() == second.to_dict()
