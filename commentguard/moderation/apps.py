from django.apps import AppConfig


class ModerationAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "commentguard.moderation"
    verbose_name = "Moderação"
