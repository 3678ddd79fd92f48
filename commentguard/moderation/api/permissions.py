import secrets

from django.conf import settings
from rest_framework.permissions import BasePermission


class HasAdminKey(BasePermission):
    """
    Verifica o header `X-Admin-Key` contra `settings.MODERATION_ADMIN_KEY`.

    Sem chave configurada, todo endpoint administrativo é negado.
    """

    message = "Invalid or missing admin key."

    def has_permission(self, request, view) -> bool:
        expected = getattr(settings, "MODERATION_ADMIN_KEY", "")
        provided = request.headers.get("X-Admin-Key", "")
        if not expected or not provided:
            return False
        return secrets.compare_digest(provided, expected)
