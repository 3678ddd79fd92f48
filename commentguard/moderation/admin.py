from django.contrib import admin
from django.db import transaction

from commentguard.moderation.models import BlockedWord, ContentHash, ModerationLog, TrustRecord
from commentguard.moderation.services.moderator import ModerationService


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(BlockedWord)
class BlockedWordAdmin(admin.ModelAdmin):
    list_display = ["word", "severity", "category", "is_active", "updated_at"]
    list_filter = ["severity", "category", "is_active"]
    search_fields = ["word"]
    readonly_fields = ["id", "created_at", "updated_at"]

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        transaction.on_commit(ModerationService.reload_blocked_words)

    def delete_model(self, request, obj):
        super().delete_model(request, obj)
        transaction.on_commit(ModerationService.reload_blocked_words)


@admin.register(TrustRecord)
class TrustRecordAdmin(ReadOnlyAdmin):
    list_display = ["user_id", "trust_score", "total_comments", "flagged_comments", "updated_at"]
    search_fields = ["user_id"]
    ordering = ["trust_score"]

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ContentHash)
class ContentHashAdmin(ReadOnlyAdmin):
    list_display = ["user_id", "preview", "occurrence_count", "last_seen"]
    search_fields = ["user_id", "content_hash"]


@admin.register(ModerationLog)
class ModerationLogAdmin(ReadOnlyAdmin):
    list_display = ["id", "user_id", "page_id", "approved", "reason", "confidence", "created_at"]
    list_filter = ["approved", "reason", "created_at"]
    search_fields = ["content", "user_id", "page_id"]

    def has_delete_permission(self, request, obj=None):
        return False
