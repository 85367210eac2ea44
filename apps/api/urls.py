# ===============================================================================
# TRACKREVIEW API MAIN URLS 🚀
# ===============================================================================
#
# URL Structure:
#   /api/checkout/     → Start checkout (embedded payment session)
#   /api/orders/       → Order status, payment verification, review submission
#   /api/promotions/   → Promo code preview and administration
#

from django.urls import include, path

from .orders import urls as order_urls
from .orders import views as order_views
from .promotions import urls as promotion_urls

app_name = 'api'

urlpatterns = [
    path('checkout/', order_views.start_checkout, name='checkout'),
    path('orders/', include((order_urls, 'orders'))),
    path('promotions/', include((promotion_urls, 'promotions'))),
]
