"""Provider factory and client cache tests."""

import pytest

from apps.common.errors import ConfigurationError
from apps.payments.adapters import StripeStub
from apps.payments.http_adapters import PayPalProvider, StripeProvider
from apps.payments.providers import (
    fingerprint,
    get_paypal_provider,
    get_provider_for,
    get_stripe_provider,
    provider_cache,
)
from apps.site_settings.services import update_settings


@pytest.fixture
def live_mode(settings):
    settings.USE_HTTP_ADAPTERS = True
    settings.STRIPE_SECRET_KEY = ""
    settings.PAYPAL_CLIENT_ID = ""
    settings.PAYPAL_CLIENT_SECRET = ""
    return settings


@pytest.mark.django_db
def test_stub_clients_are_reused():
    first = get_stripe_provider()
    assert isinstance(first, StripeStub)
    assert get_stripe_provider() is first


@pytest.mark.django_db
def test_stripe_client_is_cached_per_key(live_mode):
    update_settings({}, {"stripe_secret_key": "sk_test_one"})
    client = get_stripe_provider()
    assert isinstance(client, StripeProvider)
    assert client.secret_key == "sk_test_one"
    assert get_stripe_provider() is client

    update_settings({}, {"stripe_secret_key": "sk_test_two"})
    rotated = get_stripe_provider()
    assert rotated is not client
    assert rotated.secret_key == "sk_test_two"


@pytest.mark.django_db
def test_settings_save_drops_cached_clients(live_mode):
    update_settings({}, {"stripe_secret_key": "sk_test_one"})
    get_stripe_provider()
    assert len(provider_cache) == 1

    update_settings({"store_name": "Atelier"}, {})
    assert len(provider_cache) == 0


@pytest.mark.django_db
def test_env_key_is_used_when_database_is_empty(live_mode):
    live_mode.STRIPE_SECRET_KEY = "sk_env"
    assert get_stripe_provider().secret_key == "sk_env"


@pytest.mark.django_db
def test_missing_stripe_key(live_mode):
    with pytest.raises(ConfigurationError) as e:
        get_stripe_provider()
    assert e.value.message == "Missing Stripe secret key."


@pytest.mark.django_db
def test_missing_paypal_credentials(live_mode):
    update_settings({}, {"paypal_client_id": "client"})
    with pytest.raises(ConfigurationError) as e:
        get_paypal_provider()
    assert e.value.message == "Missing PayPal API credentials."


@pytest.mark.django_db
def test_paypal_client_built_from_settings(live_mode):
    live_mode.PAYPAL_ENV = "live"
    update_settings({}, {"paypal_client_id": "client", "paypal_client_secret": "secret"})
    client = get_paypal_provider()
    assert isinstance(client, PayPalProvider)
    assert client.base_url == "https://api-m.paypal.com"


@pytest.mark.django_db
def test_provider_for_payment_method():
    assert get_provider_for("Stripe").name == "stripe"
    assert get_provider_for("paypal").name == "paypal"


def test_fingerprint_separates_parts():
    assert fingerprint("ab", "c") != fingerprint("a", "bc")
