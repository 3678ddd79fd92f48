from dataclasses import replace
from typing import Optional

import structlog

from commentguard.moderation.domain.config import ModerationConfig
from commentguard.moderation.domain.ports import TrustRepository
from commentguard.moderation.domain.types import TrustRecord

logger = structlog.get_logger(__name__)

BASE_SCORE = 0.5
APPROVAL_WEIGHT = 0.3
HELPFUL_REPORT_WEIGHT = 0.02
HELPFUL_REPORT_CAP = 0.2
FLAG_WEIGHT = 0.4
FALSE_REPORT_WEIGHT = 0.05
FALSE_REPORT_CAP = 0.3

_METRIC_FIELDS = ("total_comments", "flagged_comments", "helpful_reports", "false_reports")


def compute_trust_score(record: TrustRecord, config: ModerationConfig) -> float:
    """
    Calcula o score de confiança a partir dos contadores do usuário.

    score = 0.5
            + taxa_aprovação * 0.3 + min(denúncias_procedentes * 0.02, 0.2)
            - taxa_sinalização * 0.4 - min(denúncias_improcedentes * 0.05, 0.3)

    O resultado é limitado a [min_trust_score, max_trust_score].
    """
    score = BASE_SCORE

    if record.total_comments > 0:
        score += (record.approved_comments / record.total_comments) * APPROVAL_WEIGHT
        score -= (record.flagged_comments / record.total_comments) * FLAG_WEIGHT

    score += min(record.helpful_reports * HELPFUL_REPORT_WEIGHT, HELPFUL_REPORT_CAP)
    score -= min(record.false_reports * FALSE_REPORT_WEIGHT, FALSE_REPORT_CAP)

    return _clamp(score, config)


def _clamp(score: float, config: ModerationConfig) -> float:
    return max(config.min_trust_score, min(config.max_trust_score, score))


class TrustScoreService:
    """
    Service de reputação por usuário.

    Leitura (`get`) só cria o registro padrão quando ausente; todas as
    mudanças passam por `TrustRepository.update`, que serializa escritas do
    mesmo usuário.
    """

    def __init__(self, repository: TrustRepository, config: Optional[ModerationConfig] = None):
        self.repository = repository
        self.config = config or ModerationConfig()

    def get(self, user_id: str) -> TrustRecord:
        return self.repository.get_or_create(user_id, self.config.default_trust_score)

    def recalculate(self, user_id: str) -> float:
        record = self._update(user_id, lambda r: r)
        return record.trust_score

    def apply_delta(self, user_id: str, delta: float) -> float:
        """
        Ajuste aditivo limitado, usado pelos fluxos de resolução de denúncias.

        Args:
            user_id: Identificador do usuário
            delta: Valor somado ao score atual (pode ser negativo)

        Returns:
            Novo score de confiança
        """
        record = self.repository.update(
            user_id,
            lambda r: replace(r, trust_score=_clamp(r.trust_score + delta, self.config)),
            self.config.default_trust_score,
        )
        logger.info("trust_delta_applied", user_id=user_id, delta=delta, trust_score=record.trust_score)
        return record.trust_score

    def record_decision(self, user_id: str, approved: bool) -> TrustRecord:
        record = self._update(
            user_id,
            lambda r: replace(
                r,
                total_comments=r.total_comments + 1,
                flagged_comments=r.flagged_comments + (0 if approved else 1),
            ),
        )
        logger.info("trust_decision_recorded", user_id=user_id, approved=approved, trust_score=record.trust_score)
        return record

    def record_report_outcome(self, user_id: str, helpful: bool) -> TrustRecord:
        field = "helpful_reports" if helpful else "false_reports"
        return self._update(user_id, lambda r: replace(r, **{field: getattr(r, field) + 1}))

    def update_metrics(self, user_id: str, **increments: int) -> TrustRecord:
        """
        Soma incrementos aos contadores e recalcula o score.

        Raises:
            ValueError: Se algum contador for desconhecido ou o resultado violar
                `flagged_comments <= total_comments`
        """
        unknown = set(increments) - set(_METRIC_FIELDS)
        if unknown:
            raise ValueError(f"Unknown trust metrics: {', '.join(sorted(unknown))}")

        def apply(record: TrustRecord) -> TrustRecord:
            updated = replace(
                record, **{name: max(0, getattr(record, name) + value) for name, value in increments.items()}
            )
            if updated.flagged_comments > updated.total_comments:
                raise ValueError("flagged_comments cannot exceed total_comments")
            return updated

        return self._update(user_id, apply)

    def stats(self, user_id: str) -> dict:
        record = self.repository.get(user_id)
        if record is None:
            return {
                "trust_score": self.config.default_trust_score,
                "total_comments": 0,
                "approval_rate": 0.0,
                "report_accuracy": 0.0,
                "flagged_comments": 0,
            }

        total_reports = record.helpful_reports + record.false_reports
        return {
            "trust_score": record.trust_score,
            "total_comments": record.total_comments,
            "approval_rate": record.approved_comments / record.total_comments if record.total_comments else 0.0,
            "report_accuracy": record.helpful_reports / total_reports if total_reports else 0.0,
            "flagged_comments": record.flagged_comments,
        }

    def top_trusted(self, limit: int = 10, min_comments: int = 5) -> list[TrustRecord]:
        return self.repository.list_top(limit, min_comments)

    def low_trust(self, threshold: float = 0.3, limit: int = 20) -> list[TrustRecord]:
        return self.repository.list_below(threshold, limit)

    def _update(self, user_id: str, mutate) -> TrustRecord:
        def apply(record: TrustRecord) -> TrustRecord:
            updated = mutate(record)
            return replace(updated, trust_score=compute_trust_score(updated, self.config))

        return self.repository.update(user_id, apply, self.config.default_trust_score)
