# ===============================================================================
# TRACKREVIEW API APP CONFIGURATION 🛠️
# ===============================================================================

from django.apps import AppConfig


class ApiConfig(AppConfig):
    """
    Configuration for the centralized API app.

    This app provides REST API endpoints for:
    - Checkout and order status
    - Payment verification
    - Review submission
    - Promo codes
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.api"
    label = "platform_api"  # Unique label to avoid conflicts
    verbose_name = "TrackReview API"
