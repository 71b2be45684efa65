import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def use_stubs_for_tests(settings):
    from apps.payments.providers import provider_cache

    settings.USE_HTTP_ADAPTERS = False
    provider_cache.clear()
    yield
    provider_cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_user(
        username="admin", email="admin@shop.test", password="pw"
    )


@pytest.fixture
def admin_client(admin_user):
    c = APIClient()
    c.force_authenticate(user=admin_user)
    return c
