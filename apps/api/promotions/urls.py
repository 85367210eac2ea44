"""
Promotions API URLs for the TrackReview platform
"""

from django.urls import path

from . import views

app_name = 'promotions'

urlpatterns = [
    path('validate/', views.validate_promo_code, name='validate'),
    path('', views.promo_code_list, name='promo_code_list'),
    path('<uuid:promo_code_id>/', views.promo_code_update, name='promo_code_update'),
    path('<uuid:promo_code_id>/usage/', views.promo_code_usage, name='promo_code_usage'),
]
