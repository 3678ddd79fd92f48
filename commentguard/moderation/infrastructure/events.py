import structlog
from django.db import transaction

from commentguard.moderation.domain.ports import DecisionPublisher
from commentguard.moderation.domain.types import ModerationDecided

logger = structlog.get_logger(__name__)


class CeleryDecisionPublisher(DecisionPublisher):
    """
    Publica `ModerationDecided` como task Celery de atualização de confiança.

    O envio acontece após o commit da transação corrente, e qualquer falha
    do broker é apenas logada: a resposta da moderação nunca depende dele.
    """

    def publish(self, event: ModerationDecided) -> None:
        transaction.on_commit(lambda: self._dispatch(event), robust=True)

    @staticmethod
    def _dispatch(event: ModerationDecided) -> None:
        from commentguard.moderation.tasks import update_trust_score_task

        try:
            update_trust_score_task.delay(event.user_id, event.approved)
        except Exception as exc:
            logger.exception(
                "trust_update_dispatch_failed", user_id=event.user_id, approved=event.approved, error=str(exc)
            )
