from django.urls import path

from commentguard.moderation.api.views import (
    BlockedWordAdminDetailView,
    BlockedWordAdminView,
    BlockedWordListView,
    HealthView,
    ModerateView,
    ModerationStatsView,
    SuspiciousUsersView,
    TrustedUsersView,
    UserMetricsView,
    UserReportOutcomeView,
    UserTrustView,
)

urlpatterns = [
    path("moderate/", ModerateView.as_view(), name="moderate"),
    path("users/<str:user_id>/trust/", UserTrustView.as_view(), name="user-trust"),
    path("users/<str:user_id>/metrics/", UserMetricsView.as_view(), name="user-metrics"),
    path("users/<str:user_id>/reports/", UserReportOutcomeView.as_view(), name="user-reports"),
    path("blocked-words/", BlockedWordListView.as_view(), name="blocked-word-list"),
    path("admin/blocked-words/", BlockedWordAdminView.as_view(), name="blocked-word-admin"),
    path("admin/blocked-words/<uuid:pk>/", BlockedWordAdminDetailView.as_view(), name="blocked-word-admin-detail"),
    path("admin/users/trusted/", TrustedUsersView.as_view(), name="trusted-users"),
    path("admin/users/suspicious/", SuspiciousUsersView.as_view(), name="suspicious-users"),
    path("health/", HealthView.as_view(), name="health"),
    path("health/stats/", ModerationStatsView.as_view(), name="moderation-stats"),
]
