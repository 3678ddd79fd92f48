import uuid

from django.db import models


class CreatedAtModel(models.Model):
    """
    Classe base abstrata para registros imutáveis (somente inserção):
    ID UUID e data de criação.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        abstract = True


class BaseModel(CreatedAtModel):
    """Classe base abstrata para registros mutáveis, com data de atualização."""

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
