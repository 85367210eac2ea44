"""
Django app configuration for Packages app
"""

from django.apps import AppConfig


class PackagesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.packages"
    verbose_name = "Reviewer Packages"
