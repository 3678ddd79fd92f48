from rest_framework import serializers

from commentguard.moderation.domain.text import is_single_token
from commentguard.moderation.models import SINGLE_WORD_MESSAGE, BlockedWord


class ModerateRequestSerializer(serializers.Serializer):
    """Serializer para a entrada de moderação."""

    # Comprimento e conteúdo vazio são decididos pelo motor, não pela validação da API.
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
    userId = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    pageId = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=255)


class ModerationScoresSerializer(serializers.Serializer):
    spam = serializers.FloatField()
    sentiment = serializers.FloatField()
    toxicity = serializers.FloatField()
    capsRatio = serializers.FloatField()
    linkCount = serializers.IntegerField()
    userTrust = serializers.FloatField()


class ModerationVerdictSerializer(serializers.Serializer):
    """Serializer para o veredicto (formato de `ModerationVerdict.to_dict`)."""

    approved = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)
    confidence = serializers.FloatField()
    flaggedWords = serializers.ListField(child=serializers.CharField())
    scores = ModerationScoresSerializer()


class TrustStatsSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    trust_score = serializers.FloatField()
    total_comments = serializers.IntegerField()
    flagged_comments = serializers.IntegerField()
    approval_rate = serializers.FloatField()
    report_accuracy = serializers.FloatField()


class TrustRecordSerializer(serializers.Serializer):
    """Serializer para `TrustRecord` do domínio (listagens administrativas)."""

    user_id = serializers.CharField()
    trust_score = serializers.FloatField()
    total_comments = serializers.IntegerField()
    flagged_comments = serializers.IntegerField()
    helpful_reports = serializers.IntegerField()
    false_reports = serializers.IntegerField()
    updated_at = serializers.DateTimeField(allow_null=True)


class TrustMetricsUpdateSerializer(serializers.Serializer):
    """Incrementos aplicados aos contadores de confiança."""

    total_comments = serializers.IntegerField(required=False, default=0)
    flagged_comments = serializers.IntegerField(required=False, default=0)
    helpful_reports = serializers.IntegerField(required=False, default=0)
    false_reports = serializers.IntegerField(required=False, default=0)

    def validate(self, attrs):
        if not any(attrs.values()):
            raise serializers.ValidationError("At least one metric increment is required.")
        return attrs


class ReportOutcomeSerializer(serializers.Serializer):
    helpful = serializers.BooleanField()


class BlockedWordSerializer(serializers.ModelSerializer):
    """Serializer para leitura de palavras bloqueadas."""

    class Meta:
        model = BlockedWord
        fields = ["id", "word", "severity", "category", "is_active", "created_at"]
        read_only_fields = fields


class BlockedWordCreateSerializer(serializers.Serializer):
    """Serializer para criação/atualização de palavras bloqueadas."""

    word = serializers.CharField(max_length=255)
    severity = serializers.ChoiceField(choices=BlockedWord.Severity.choices, default=BlockedWord.Severity.MEDIUM)
    category = serializers.CharField(max_length=50, required=False, default="general")

    def validate_word(self, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise serializers.ValidationError("Word cannot be blank.")
        if not is_single_token(value):
            raise serializers.ValidationError(SINGLE_WORD_MESSAGE)
        return value


class HealthSerializer(serializers.Serializer):
    status = serializers.CharField()
    database = serializers.CharField()
    blocked_words_cached = serializers.IntegerField(allow_null=True)


class ModerationStatsSerializer(serializers.Serializer):
    period_hours = serializers.IntegerField()
    total = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()
    approval_rate = serializers.FloatField()
    top_reasons = serializers.ListField(child=serializers.DictField())
