from django.urls import path

from . import views

app_name = "integrations"

urlpatterns = [
    # ===============================================================================
    # WEBHOOK ENDPOINTS
    # ===============================================================================
    path("payment/", views.StripeWebhookView.as_view(), name="payment_webhook"),
]
