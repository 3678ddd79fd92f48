from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

SEVERITY_RANK: dict[str, int] = {"low": 1, "medium": 2, "high": 3, "critical": 4}

# Peso de cada severidade na soma usada pela regra de palavras bloqueadas.
SEVERITY_WEIGHT: dict[str, int] = {"low": 1, "medium": 3, "high": 5, "critical": 10}

PREVIEW_LENGTH = 100
LOGGED_CONTENT_LENGTH = 5000


@dataclass(frozen=True)
class BlockedWordEntry:
    word: str
    severity: str


@dataclass(frozen=True)
class TrustRecord:
    """Reputação de um usuário usada pelo motor de moderação."""

    user_id: str
    trust_score: float = 0.5
    total_comments: int = 0
    flagged_comments: int = 0
    helpful_reports: int = 0
    false_reports: int = 0
    updated_at: Optional[datetime] = None

    @property
    def approved_comments(self) -> int:
        return self.total_comments - self.flagged_comments


@dataclass
class ModerationScores:
    spam: float = 0.0
    sentiment: float = 0.0
    toxicity: float = 0.0
    caps_ratio: float = 0.0
    link_count: int = 0
    user_trust: float = 0.5

    def to_dict(self) -> dict:
        return {
            "spam": self.spam,
            "sentiment": self.sentiment,
            "toxicity": self.toxicity,
            "capsRatio": self.caps_ratio,
            "linkCount": self.link_count,
            "userTrust": self.user_trust,
        }


@dataclass
class ModerationVerdict:
    """
    Veredicto retornado por uma chamada de moderação.

    `hard_rule` marca rejeições estruturais (validação, duplicado, código,
    links), que nunca passam pelo override de confiança.
    """

    approved: bool = True
    reason: Optional[str] = None
    confidence: float = 1.0
    flagged_words: list[str] = field(default_factory=list)
    scores: ModerationScores = field(default_factory=ModerationScores)
    hard_rule: bool = False

    @classmethod
    def reject(cls, reason: str, confidence: float, hard_rule: bool = False, **kwargs) -> "ModerationVerdict":
        return cls(approved=False, reason=reason, confidence=confidence, hard_rule=hard_rule, **kwargs)

    def to_dict(self) -> dict:
        return {
            "approved": self.approved,
            "reason": self.reason,
            "confidence": self.confidence,
            "flaggedWords": list(self.flagged_words),
            "scores": self.scores.to_dict(),
        }


@dataclass(frozen=True)
class ModerationLogEntry:
    content: str
    approved: bool
    reason: Optional[str]
    confidence: float
    flagged_words: list[str]
    user_id: Optional[str]
    page_id: Optional[str]
    scores: ModerationScores

    @classmethod
    def from_verdict(
        cls, content: str, verdict: ModerationVerdict, user_id: Optional[str], page_id: Optional[str]
    ) -> "ModerationLogEntry":
        return cls(
            content=content[:LOGGED_CONTENT_LENGTH],
            approved=verdict.approved,
            reason=verdict.reason,
            confidence=verdict.confidence,
            flagged_words=list(verdict.flagged_words),
            user_id=user_id,
            page_id=page_id,
            scores=verdict.scores,
        )


@dataclass(frozen=True)
class ModerationDecided:
    """Evento emitido depois de cada decisão que deve afetar a confiança do autor."""

    user_id: str
    approved: bool
    page_id: Optional[str] = None
    reason: Optional[str] = None
    confidence: float = 1.0
