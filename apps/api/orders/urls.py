"""
Order API URLs for the TrackReview platform
"""

from django.urls import path

from . import views

app_name = 'orders'

urlpatterns = [
    path('<uuid:order_id>/status/', views.order_status, name='order_status'),
    path('<uuid:order_id>/verify-payment/', views.verify_payment, name='verify_payment'),
    path('<uuid:order_id>/review/', views.submit_review, name='submit_review'),
]
