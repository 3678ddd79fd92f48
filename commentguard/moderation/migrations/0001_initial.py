import uuid

import django.db.models.expressions
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BlockedWord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("word", models.CharField(max_length=255, unique=True, verbose_name="Palavra")),
                (
                    "severity",
                    models.CharField(
                        choices=[("low", "Baixa"), ("medium", "Média"), ("high", "Alta"), ("critical", "Crítica")],
                        default="medium",
                        max_length=20,
                        verbose_name="Severidade",
                    ),
                ),
                ("category", models.CharField(default="general", max_length=50, verbose_name="Categoria")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="Ativa")),
            ],
            options={
                "verbose_name": "Palavra Bloqueada",
                "verbose_name_plural": "Palavras Bloqueadas",
                "ordering": ["word"],
            },
        ),
        migrations.CreateModel(
            name="TrustRecord",
            fields=[
                (
                    "user_id",
                    models.CharField(max_length=255, primary_key=True, serialize=False, verbose_name="Usuário"),
                ),
                ("trust_score", models.FloatField(default=0.5, verbose_name="Score de Confiança")),
                ("total_comments", models.PositiveIntegerField(default=0, verbose_name="Total de Comentários")),
                (
                    "flagged_comments",
                    models.PositiveIntegerField(default=0, verbose_name="Comentários Sinalizados"),
                ),
                ("helpful_reports", models.PositiveIntegerField(default=0, verbose_name="Denúncias Procedentes")),
                ("false_reports", models.PositiveIntegerField(default=0, verbose_name="Denúncias Improcedentes")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Confiança do Usuário",
                "verbose_name_plural": "Confiança dos Usuários",
                "indexes": [models.Index(fields=["trust_score"], name="trust_record_score_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("flagged_comments__lte", django.db.models.expressions.F("total_comments"))
                        ),
                        name="trust_flagged_lte_total",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="ContentHash",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user_id", models.CharField(max_length=255, verbose_name="Usuário")),
                ("content_hash", models.CharField(max_length=64, verbose_name="Hash do Conteúdo")),
                ("preview", models.CharField(blank=True, default="", max_length=100, verbose_name="Prévia")),
                ("occurrence_count", models.PositiveIntegerField(default=1, verbose_name="Ocorrências")),
                ("first_seen", models.DateTimeField(verbose_name="Primeira Ocorrência")),
                ("last_seen", models.DateTimeField(db_index=True, verbose_name="Última Ocorrência")),
            ],
            options={
                "verbose_name": "Hash de Conteúdo",
                "verbose_name_plural": "Hashes de Conteúdo",
                "constraints": [
                    models.UniqueConstraint(fields=("user_id", "content_hash"), name="uniq_content_hash_per_user")
                ],
            },
        ),
        migrations.CreateModel(
            name="ModerationLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("content", models.TextField(verbose_name="Conteúdo")),
                ("approved", models.BooleanField(verbose_name="Aprovado")),
                ("reason", models.CharField(blank=True, max_length=255, null=True, verbose_name="Motivo")),
                ("confidence", models.FloatField(verbose_name="Confiança")),
                ("flagged_words", models.JSONField(default=list, verbose_name="Palavras Sinalizadas")),
                (
                    "user_id",
                    models.CharField(blank=True, db_index=True, max_length=255, null=True, verbose_name="Usuário"),
                ),
                ("page_id", models.CharField(blank=True, max_length=255, null=True, verbose_name="Página")),
                ("spam_score", models.FloatField(default=0.0, verbose_name="Score de Spam")),
                ("sentiment_score", models.FloatField(default=0.0, verbose_name="Score de Sentimento")),
                ("toxicity_score", models.FloatField(default=0.0, verbose_name="Score de Toxicidade")),
                ("caps_ratio", models.FloatField(default=0.0, verbose_name="Proporção de Maiúsculas")),
                ("link_count", models.PositiveIntegerField(default=0, verbose_name="Quantidade de Links")),
                ("user_trust", models.FloatField(default=0.5, verbose_name="Confiança do Usuário")),
            ],
            options={
                "verbose_name": "Log de Moderação",
                "verbose_name_plural": "Logs de Moderação",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["approved", "created_at"], name="moderation_log_verdict_idx"),
                    models.Index(fields=["page_id", "created_at"], name="moderation_log_page_idx"),
                ],
            },
        ),
    ]
