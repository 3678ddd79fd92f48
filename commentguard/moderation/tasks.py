import structlog
from celery import shared_task
from celery.exceptions import SoftTimeLimitExceeded

from commentguard.moderation.domain.config import ModerationConfig
from commentguard.moderation.infrastructure.repositories import DjangoTrustRepository
from commentguard.moderation.services.trust import TrustScoreService

logger = structlog.get_logger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(Exception,),
    retry_backoff=True,
    task_time_limit=60,
    task_soft_time_limit=50,
    acks_late=True,
)
def update_trust_score_task(self, user_id: str, approved: bool) -> dict:
    """
    Consome o evento ModerationDecided: atualiza os contadores do autor e
    recalcula seu score de confiança.

    Roda fora do caminho da resposta; a consistência do score em relação ao
    comentário que disparou a task é eventual. A atualização acontece com
    'select_for_update' no repositório, serializando tasks do mesmo usuário.
    """
    log = logger.bind(user_id=user_id, approved=approved, task_id=self.request.id)
    try:
        service = TrustScoreService(DjangoTrustRepository(), ModerationConfig.from_settings())
        record = service.record_decision(user_id, approved)

        log.info("trust_score_updated", trust_score=record.trust_score, total_comments=record.total_comments)
        return {"status": "success", "user_id": user_id, "trust_score": record.trust_score}

    except SoftTimeLimitExceeded:
        log.warning("trust_update_timeout_soft", retry=self.request.retries)
        raise self.retry(exc=SoftTimeLimitExceeded("Timeout na atualização de confiança"))
    except Exception as exc:
        log.exception("trust_update_failed", retry_count=self.request.retries)
        raise self.retry(exc=exc)


@shared_task(bind=True, max_retries=3, default_retry_delay=5, retry_backoff=True, acks_late=True)
def record_report_outcome_task(self, user_id: str, helpful: bool) -> dict:
    """Aplica o resultado de uma denúncia resolvida à reputação de quem denunciou."""
    log = logger.bind(user_id=user_id, helpful=helpful, task_id=self.request.id)
    try:
        service = TrustScoreService(DjangoTrustRepository(), ModerationConfig.from_settings())
        record = service.record_report_outcome(user_id, helpful)

        log.info("report_outcome_recorded", trust_score=record.trust_score)
        return {"status": "success", "user_id": user_id, "trust_score": record.trust_score}

    except Exception as exc:
        log.exception("report_outcome_failed", retry_count=self.request.retries)
        raise self.retry(exc=exc)
