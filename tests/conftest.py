# ===============================================================================
# PYTEST CONFIGURATION FOR THE TRACKREVIEW PLATFORM
# ===============================================================================
"""
Global test configuration.

Test Structure:
- tests/ mirrors apps/ structure for app-specific tests
- tests/factories/ holds plain builder functions shared across apps
- Naming convention: test_{app}_{feature}.py

Run specific app tests: pytest tests/orders/
"""

import os

import django


def pytest_configure():
    """Configure Django settings for pytest"""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.test')
    django.setup()

# ===============================================================================
# PYTEST FIXTURES
# ===============================================================================

import pytest  # noqa: E402

from tests.factories.core import (  # noqa: E402
    create_admin,
    create_artist,
    create_package,
    create_reviewer,
)


@pytest.fixture
def artist():
    return create_artist()


@pytest.fixture
def reviewer():
    return create_reviewer()


@pytest.fixture
def admin_user():
    return create_admin()


@pytest.fixture
def package(reviewer):
    return create_package(reviewer)
