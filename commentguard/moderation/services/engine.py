"""
Motor de decisão de moderação.

Fluxo por submissão: Recebido -> Validado -> Triado -> Pontuado -> Decidido
-> Logado -> Confiança atualizada (assíncrono, via `ModerationDecided`).

As regras são avaliadas em ordem fixa e a primeira que casar decide.
Regras estruturais (validação, duplicado, código, links) nunca são
revertidas pelo override de confiança; as heurísticas (palavras
bloqueadas, spam, sentimento, maiúsculas, repetição) podem ser.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

import structlog

from commentguard.moderation.domain.config import ModerationConfig
from commentguard.moderation.domain.format import FormatAnalyzer
from commentguard.moderation.domain.ports import DecisionPublisher, ModerationLogRepository
from commentguard.moderation.domain.sentiment import SentimentScorer
from commentguard.moderation.domain.spam import SpamScorer
from commentguard.moderation.domain.text import tokenize
from commentguard.moderation.domain.types import (
    SEVERITY_WEIGHT,
    ModerationDecided,
    ModerationLogEntry,
    ModerationScores,
    ModerationVerdict,
)
from commentguard.moderation.infrastructure.word_cache import BlockedWordStore
from commentguard.moderation.services.duplicates import DuplicateDetector
from commentguard.moderation.services.trust import TrustScoreService

logger = structlog.get_logger(__name__)

T = TypeVar("T")

EMPTY_CONTENT = "Empty content"
CONTENT_TOO_LONG = "Content too long"
CONTENT_TOO_SHORT = "Content too short"
DUPLICATE_CONTENT = "Duplicate content detected. Please wait {minutes} minutes before posting the same comment again."
EMBEDDED_CODE = "HTML, CSS, or JavaScript code is not allowed"
EXTERNAL_LINKS = "External links are not allowed"
TOO_MANY_LINKS = "Too many links"
PROHIBITED_LANGUAGE = "Contains prohibited language"
DETECTED_AS_SPAM = "Detected as spam"
EXTREMELY_NEGATIVE = "Extremely negative content"
EXCESSIVE_CAPS = "Excessive capitalization"
EXCESSIVE_REPETITION = "Excessive character repetition"
SERVICE_ERROR = "Moderation service error"


@dataclass
class _Signals:
    flagged_words: list[str] = field(default_factory=list)
    blocked_weight: int = 0
    has_repetition: bool = False
    scores: ModerationScores = field(default_factory=ModerationScores)


class ModerationDecisionEngine:
    def __init__(
        self,
        word_store: BlockedWordStore,
        duplicate_detector: DuplicateDetector,
        trust_service: TrustScoreService,
        log_repository: ModerationLogRepository,
        publisher: Optional[DecisionPublisher] = None,
        config: Optional[ModerationConfig] = None,
    ):
        self.config = config or ModerationConfig()
        self.word_store = word_store
        self.duplicate_detector = duplicate_detector
        self.trust_service = trust_service
        self.log_repository = log_repository
        self.publisher = publisher
        self.spam_scorer = SpamScorer(self.config.spam_phrases)
        self.sentiment_scorer = SentimentScorer()
        self.format = FormatAnalyzer

    def moderate(self, content: str, user_id: Optional[str] = None, page_id: Optional[str] = None) -> ModerationVerdict:
        """
        Decide se um comentário é aprovado ou rejeitado.

        Falhas de um sinal isolado usam um valor neutro; qualquer outra
        exceção gera rejeição com "Moderation service error" (falha fechada).

        Args:
            content: Texto do comentário
            user_id: Autor (opcional); habilita duplicados e confiança
            page_id: Página onde o comentário foi enviado (opcional)

        Returns:
            ModerationVerdict com approved, reason, confidence, flagged_words e scores
        """
        content = content or ""
        log = logger.bind(user_id=user_id, page_id=page_id, content_length=len(content))
        affects_trust = False

        try:
            verdict, affects_trust = self._decide(content, user_id, log)
        except Exception as exc:
            log.exception("moderation_engine_failed", error=str(exc))
            verdict = ModerationVerdict.reject(SERVICE_ERROR, 1.0, hard_rule=True)
            affects_trust = False

        log.info(
            "moderation_decided",
            approved=verdict.approved,
            reason=verdict.reason,
            confidence=verdict.confidence,
            preview=content[:50],
        )
        self._append_log(content, verdict, user_id, page_id, log)

        if user_id and affects_trust:
            self._publish(
                ModerationDecided(
                    user_id=user_id,
                    approved=verdict.approved,
                    page_id=page_id,
                    reason=verdict.reason,
                    confidence=verdict.confidence,
                ),
                log,
            )

        return verdict

    def _decide(self, content: str, user_id: Optional[str], log) -> tuple[ModerationVerdict, bool]:
        trimmed = content.strip()
        config = self.config

        if not trimmed:
            return ModerationVerdict.reject(EMPTY_CONTENT, 1.0, hard_rule=True), False
        if len(content) > config.max_comment_length:
            return ModerationVerdict.reject(CONTENT_TOO_LONG, 1.0, hard_rule=True), False
        if len(trimmed) < config.min_comment_length:
            return ModerationVerdict.reject(CONTENT_TOO_SHORT, 1.0, hard_rule=True), False

        is_duplicate = bool(user_id) and self._guard(
            "duplicate", lambda: self.duplicate_detector.is_duplicate(user_id, trimmed), False, log
        )
        if is_duplicate:
            reason = DUPLICATE_CONTENT.format(minutes=config.duplicate_window_minutes)
            return ModerationVerdict.reject(reason, config.duplicate_confidence, hard_rule=True), True

        if self.format.contains_embedded_code(trimmed):
            return ModerationVerdict.reject(EMBEDDED_CODE, config.code_confidence, hard_rule=True), True

        link_count = self.format.count_links(trimmed)
        link_scores = ModerationScores(link_count=link_count)
        if config.link_budget_mode:
            if link_count > config.max_links_allowed:
                return (
                    ModerationVerdict.reject(
                        TOO_MANY_LINKS, config.link_confidence, hard_rule=True, scores=link_scores
                    ),
                    True,
                )
        elif self.format.contains_disallowed_link(trimmed, config.link_tlds):
            return (
                ModerationVerdict.reject(EXTERNAL_LINKS, config.link_confidence, hard_rule=True, scores=link_scores),
                True,
            )

        signals = self._collect_signals(trimmed, user_id, link_count, log)
        verdict = self._apply_rules(trimmed, signals)
        return self._apply_trust_override(verdict, log), True

    def _collect_signals(self, content: str, user_id: Optional[str], link_count: int, log) -> _Signals:
        tokens = tokenize(content)
        flagged, weight = self._guard("blocked_words", lambda: self._scan_blocked_words(tokens), ([], 0), log)
        sentiment = self._guard("sentiment", lambda: self.sentiment_scorer.score_tokens(tokens), 0.0, log)

        scores = ModerationScores(
            spam=self._guard("spam", lambda: self.spam_scorer.score(content), 0.0, log),
            sentiment=sentiment,
            toxicity=SentimentScorer.toxicity(sentiment),
            caps_ratio=self._guard("caps_ratio", lambda: self.format.caps_ratio(content), 0.0, log),
            link_count=link_count,
            user_trust=self._guard(
                "trust", lambda: self._lookup_trust(user_id), self.config.default_trust_score, log
            ),
        )
        return _Signals(
            flagged_words=flagged,
            blocked_weight=weight,
            has_repetition=self._guard(
                "repetition", lambda: self.format.has_excessive_repetition(content), False, log
            ),
            scores=scores,
        )

    def _apply_rules(self, content: str, signals: _Signals) -> ModerationVerdict:
        config = self.config
        scores = signals.scores
        flagged = list(signals.flagged_words)

        if signals.blocked_weight >= config.blocked_word_reject_weight:
            return ModerationVerdict.reject(
                PROHIBITED_LANGUAGE, config.blocked_word_confidence, flagged_words=flagged, scores=scores
            )
        if scores.spam > config.spam_threshold:
            return ModerationVerdict.reject(DETECTED_AS_SPAM, scores.spam, flagged_words=flagged, scores=scores)
        if scores.sentiment < config.sentiment_threshold:
            confidence = min(abs(scores.sentiment) / 5, 1.0)
            return ModerationVerdict.reject(EXTREMELY_NEGATIVE, confidence, flagged_words=flagged, scores=scores)
        if scores.caps_ratio > config.caps_ratio_threshold and len(content) > config.caps_min_length:
            return ModerationVerdict.reject(
                EXCESSIVE_CAPS, config.caps_confidence, flagged_words=flagged, scores=scores
            )
        if signals.has_repetition:
            return ModerationVerdict.reject(
                EXCESSIVE_REPETITION, config.repetition_confidence, flagged_words=flagged, scores=scores
            )

        return ModerationVerdict(approved=True, confidence=1.0, flagged_words=flagged, scores=scores)

    def _apply_trust_override(self, verdict: ModerationVerdict, log) -> ModerationVerdict:
        """Aprova rejeições heurísticas de baixa confiança para usuários confiáveis."""
        if verdict.approved or verdict.hard_rule:
            return verdict

        trust = verdict.scores.user_trust
        is_trusted = trust > self.config.trust_override_min_score
        if is_trusted and verdict.confidence < self.config.trust_override_max_confidence:
            log.info("trust_override_applied", overridden_reason=verdict.reason, user_trust=trust)
            verdict.approved = True
            verdict.reason = None
            verdict.flagged_words = []
        return verdict

    def _scan_blocked_words(self, tokens: list[str]) -> tuple[list[str], int]:
        flagged: list[str] = []
        weight = 0
        for token in tokens:
            severity = self.word_store.lookup(token)
            if severity is None:
                continue
            flagged.append(token)
            weight += SEVERITY_WEIGHT.get(severity, 0)
        return flagged, weight

    def _lookup_trust(self, user_id: Optional[str]) -> float:
        if not user_id:
            return self.config.default_trust_score
        return self.trust_service.get(user_id).trust_score

    def _append_log(self, content: str, verdict: ModerationVerdict, user_id, page_id, log) -> None:
        try:
            self.log_repository.append(ModerationLogEntry.from_verdict(content, verdict, user_id, page_id))
        except Exception as exc:
            log.warning("moderation_log_write_failed", error=str(exc))

    def _publish(self, event: ModerationDecided, log) -> None:
        if self.publisher is None:
            return
        try:
            self.publisher.publish(event)
        except Exception as exc:
            log.exception("moderation_event_publish_failed", error=str(exc))

    @staticmethod
    def _guard(signal: str, compute: Callable[[], T], default: T, log) -> T:
        try:
            return compute()
        except Exception as exc:
            log.warning("moderation_signal_failed", signal=signal, error=str(exc))
            return default
