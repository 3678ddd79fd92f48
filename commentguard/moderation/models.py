from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from commentguard.moderation.domain.text import is_single_token
from commentguard.utils.models import BaseModel, CreatedAtModel

SINGLE_WORD_MESSAGE = "Blocked words must be a single word of letters, digits or underscores."


class BlockedWord(BaseModel):
    class Severity(models.TextChoices):
        LOW = "low", "Baixa"
        MEDIUM = "medium", "Média"
        HIGH = "high", "Alta"
        CRITICAL = "critical", "Crítica"

    word = models.CharField("Palavra", max_length=255, unique=True)
    severity = models.CharField("Severidade", max_length=20, choices=Severity.choices, default=Severity.MEDIUM)
    category = models.CharField("Categoria", max_length=50, default="general")
    is_active = models.BooleanField("Ativa", default=True, db_index=True)

    class Meta:
        verbose_name = "Palavra Bloqueada"
        verbose_name_plural = "Palavras Bloqueadas"
        ordering = ["word"]

    def clean(self):
        # O motor compara tokens; hífen, apóstrofo ou espaço nunca casariam.
        if self.word and not is_single_token(self.word):
            raise ValidationError({"word": SINGLE_WORD_MESSAGE})

    def save(self, *args, **kwargs):
        self.word = self.word.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.word} ({self.severity})"


class TrustRecord(models.Model):
    """Reputação por usuário. Nunca é removida; apenas atualizada após decisões e denúncias."""

    user_id = models.CharField("Usuário", max_length=255, primary_key=True)
    trust_score = models.FloatField("Score de Confiança", default=0.5)
    total_comments = models.PositiveIntegerField("Total de Comentários", default=0)
    flagged_comments = models.PositiveIntegerField("Comentários Sinalizados", default=0)
    helpful_reports = models.PositiveIntegerField("Denúncias Procedentes", default=0)
    false_reports = models.PositiveIntegerField("Denúncias Improcedentes", default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Confiança do Usuário"
        verbose_name_plural = "Confiança dos Usuários"
        indexes = [models.Index(fields=["trust_score"], name="trust_record_score_idx")]
        constraints = [
            models.CheckConstraint(
                condition=Q(flagged_comments__lte=F("total_comments")), name="trust_flagged_lte_total"
            ),
        ]

    def __str__(self):
        return f"{self.user_id}: {self.trust_score:.2f}"


class ContentHash(BaseModel):
    user_id = models.CharField("Usuário", max_length=255)
    content_hash = models.CharField("Hash do Conteúdo", max_length=64)
    preview = models.CharField("Prévia", max_length=100, blank=True, default="")
    occurrence_count = models.PositiveIntegerField("Ocorrências", default=1)
    first_seen = models.DateTimeField("Primeira Ocorrência")
    last_seen = models.DateTimeField("Última Ocorrência", db_index=True)

    class Meta:
        verbose_name = "Hash de Conteúdo"
        verbose_name_plural = "Hashes de Conteúdo"
        constraints = [
            models.UniqueConstraint(fields=["user_id", "content_hash"], name="uniq_content_hash_per_user"),
        ]

    def __str__(self):
        return f"{self.user_id}: {self.preview[:30]} (x{self.occurrence_count})"


class ModerationLog(CreatedAtModel):
    content = models.TextField("Conteúdo")
    approved = models.BooleanField("Aprovado")
    reason = models.CharField("Motivo", max_length=255, null=True, blank=True)
    confidence = models.FloatField("Confiança")
    flagged_words = models.JSONField("Palavras Sinalizadas", default=list)
    user_id = models.CharField("Usuário", max_length=255, null=True, blank=True, db_index=True)
    page_id = models.CharField("Página", max_length=255, null=True, blank=True)
    spam_score = models.FloatField("Score de Spam", default=0.0)
    sentiment_score = models.FloatField("Score de Sentimento", default=0.0)
    toxicity_score = models.FloatField("Score de Toxicidade", default=0.0)
    caps_ratio = models.FloatField("Proporção de Maiúsculas", default=0.0)
    link_count = models.PositiveIntegerField("Quantidade de Links", default=0)
    user_trust = models.FloatField("Confiança do Usuário", default=0.5)

    class Meta:
        verbose_name = "Log de Moderação"
        verbose_name_plural = "Logs de Moderação"
        indexes = [
            models.Index(fields=["approved", "created_at"], name="moderation_log_verdict_idx"),
            models.Index(fields=["page_id", "created_at"], name="moderation_log_page_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        verdict = "APPROVED" if self.approved else "REJECTED"
        return f"{verdict}: {self.content[:30]}"
