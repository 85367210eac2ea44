"""
URL configuration for the TrackReview platform
"""

from django.contrib import admin
from django.urls import include, path

# ===============================================================================
# MAIN URL PATTERNS
# ===============================================================================

urlpatterns = [
    path("admin/", admin.site.urls),
    # Payment provider webhooks (signature verified, CSRF exempt)
    path("webhooks/", include("apps.integrations.urls")),
    # API endpoints
    path("api/", include("apps.api.urls")),
]
