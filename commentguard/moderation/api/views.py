from datetime import timedelta

import structlog
from django.db import DatabaseError, connection
from django.db.models import Count, Q
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from commentguard.moderation.api.pagination import BlockedWordPagination
from commentguard.moderation.api.permissions import HasAdminKey
from commentguard.moderation.api.serializers import (
    BlockedWordCreateSerializer,
    BlockedWordSerializer,
    HealthSerializer,
    ModerateRequestSerializer,
    ModerationStatsSerializer,
    ModerationVerdictSerializer,
    ReportOutcomeSerializer,
    TrustMetricsUpdateSerializer,
    TrustRecordSerializer,
    TrustStatsSerializer,
)
from commentguard.moderation.models import ModerationLog
from commentguard.moderation.services.blocked_words import BlockedWordService
from commentguard.moderation.services.moderator import ModerationService

logger = structlog.get_logger(__name__)

STATS_PERIOD_HOURS = 24


def _int_param(request: Request, name: str, default: int, maximum: int = 100) -> int:
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default
    return max(1, min(value, maximum))


class ModerateView(APIView):
    """Modera um comentário e devolve o veredicto."""

    @extend_schema(
        summary="Moderar comentário",
        request=ModerateRequestSerializer,
        responses={200: ModerationVerdictSerializer},
        tags=["Moderation"],
    )
    def post(self, request: Request) -> Response:
        serializer = ModerateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        verdict = ModerationService.moderate(
            serializer.validated_data["content"],
            user_id=serializer.validated_data.get("userId") or None,
            page_id=serializer.validated_data.get("pageId") or None,
        )
        return Response(verdict.to_dict(), status=status.HTTP_200_OK)


class UserTrustView(APIView):
    @extend_schema(summary="Score de confiança do usuário", responses={200: TrustStatsSerializer}, tags=["Trust"])
    def get(self, request: Request, user_id: str) -> Response:
        stats = ModerationService.trust_service().stats(user_id)
        return Response(TrustStatsSerializer({"user_id": user_id, **stats}).data)


class UserMetricsView(APIView):
    permission_classes = [HasAdminKey]

    @extend_schema(
        summary="Incrementar métricas de confiança",
        request=TrustMetricsUpdateSerializer,
        responses={200: TrustRecordSerializer},
        tags=["Trust"],
    )
    def post(self, request: Request, user_id: str) -> Response:
        """Soma os incrementos aos contadores do usuário e recalcula o score."""
        serializer = TrustMetricsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        increments = {name: value for name, value in serializer.validated_data.items() if value}
        try:
            record = ModerationService.trust_service().update_metrics(user_id, **increments)
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TrustRecordSerializer(record).data)


class UserReportOutcomeView(APIView):
    permission_classes = [HasAdminKey]

    @extend_schema(
        summary="Registrar resultado de denúncia",
        request=ReportOutcomeSerializer,
        responses={200: TrustRecordSerializer},
        tags=["Trust"],
    )
    def post(self, request: Request, user_id: str) -> Response:
        serializer = ReportOutcomeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        record = ModerationService.trust_service().record_report_outcome(
            user_id, serializer.validated_data["helpful"]
        )
        return Response(TrustRecordSerializer(record).data)


@extend_schema(summary="Listar palavras bloqueadas", tags=["Blocked words"])
class BlockedWordListView(ListAPIView):
    serializer_class = BlockedWordSerializer
    pagination_class = BlockedWordPagination

    def get_queryset(self):
        return BlockedWordService.list_words()


class BlockedWordAdminView(APIView):
    permission_classes = [HasAdminKey]

    @extend_schema(
        summary="Adicionar palavra bloqueada",
        request=BlockedWordCreateSerializer,
        responses={201: BlockedWordSerializer},
        tags=["Blocked words"],
    )
    def post(self, request: Request) -> Response:
        """Cria ou reativa uma palavra; o cache do motor é recarregado após o commit."""
        serializer = BlockedWordCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        blocked_word = BlockedWordService.add_word(**serializer.validated_data)
        return Response(BlockedWordSerializer(blocked_word).data, status=status.HTTP_201_CREATED)


class BlockedWordAdminDetailView(APIView):
    permission_classes = [HasAdminKey]

    @extend_schema(summary="Remover palavra bloqueada", responses={204: None}, tags=["Blocked words"])
    def delete(self, request: Request, pk) -> Response:
        if BlockedWordService.remove_word(pk) is None:
            return Response({"detail": "Blocked word not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TrustedUsersView(APIView):
    permission_classes = [HasAdminKey]

    @extend_schema(
        summary="Usuários mais confiáveis",
        parameters=[
            OpenApiParameter("limit", int, description="Quantidade máxima de usuários"),
            OpenApiParameter("min_comments", int, description="Mínimo de comentários moderados"),
        ],
        responses={200: TrustRecordSerializer(many=True)},
        tags=["Trust"],
    )
    def get(self, request: Request) -> Response:
        records = ModerationService.trust_service().top_trusted(
            limit=_int_param(request, "limit", 10),
            min_comments=_int_param(request, "min_comments", 5, maximum=10_000),
        )
        return Response(TrustRecordSerializer(records, many=True).data)


class SuspiciousUsersView(APIView):
    permission_classes = [HasAdminKey]

    @extend_schema(
        summary="Usuários com baixa confiança",
        parameters=[
            OpenApiParameter("threshold", float, description="Score abaixo do qual o usuário é listado"),
            OpenApiParameter("limit", int, description="Quantidade máxima de usuários"),
        ],
        responses={200: TrustRecordSerializer(many=True)},
        tags=["Trust"],
    )
    def get(self, request: Request) -> Response:
        try:
            threshold = float(request.query_params.get("threshold", 0.3))
        except ValueError:
            threshold = 0.3

        records = ModerationService.trust_service().low_trust(
            threshold=threshold, limit=_int_param(request, "limit", 20)
        )
        return Response(TrustRecordSerializer(records, many=True).data)


class HealthView(APIView):
    """Liveness com verificação do banco e tamanho do cache de palavras."""

    @extend_schema(summary="Health check", responses={200: HealthSerializer, 503: HealthSerializer}, tags=["Health"])
    def get(self, request: Request) -> Response:
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except DatabaseError as exc:
            logger.error("health_database_unavailable", error=str(exc))
            data = {"status": "unhealthy", "database": "unavailable", "blocked_words_cached": None}
            return Response(HealthSerializer(data).data, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        data = {
            "status": "healthy",
            "database": "ok",
            "blocked_words_cached": ModerationService.get_engine().word_store.size,
        }
        return Response(HealthSerializer(data).data)


class ModerationStatsView(APIView):
    permission_classes = [HasAdminKey]

    @extend_schema(
        summary="Estatísticas de moderação das últimas 24h",
        responses={200: ModerationStatsSerializer},
        tags=["Health"],
    )
    def get(self, request: Request) -> Response:
        since = timezone.now() - timedelta(hours=STATS_PERIOD_HOURS)
        logs = ModerationLog.objects.filter(created_at__gte=since)

        totals = logs.aggregate(
            total=Count("id"),
            approved=Count("id", filter=Q(approved=True)),
            rejected=Count("id", filter=Q(approved=False)),
        )
        top_reasons = (
            logs.filter(approved=False)
            .values("reason")
            .annotate(count=Count("id"))
            .order_by("-count", "reason")[:10]
        )

        data = {
            "period_hours": STATS_PERIOD_HOURS,
            **totals,
            "approval_rate": totals["approved"] / totals["total"] if totals["total"] else 0.0,
            "top_reasons": list(top_reasons),
        }
        return Response(ModerationStatsSerializer(data).data)
