# ===============================================================================
# TRACKREVIEW API - CENTRALIZED API MODULE 🚀
# ===============================================================================
#
# Structure:
#   - api/orders/     → Checkout, order status, payment verification, review submission
#   - api/promotions/ → Promo code preview and administration
#
# Import Direction (CRITICAL):
#   api → apps.{domain}.services → apps.{domain}.models
#   Never import api modules from domain apps to avoid circular dependencies
#
