from django.db import models

# Credentials that are only ever stored encrypted. The public name is used in
# admin payloads (``stripeSecretKey``) and the ``has_<name>`` flags.
SECRET_FIELDS = {
    "stripe_secret_key": "stripe_secret_key_encrypted",
    "stripe_publishable_key": "stripe_publishable_key_encrypted",
    "paypal_client_id": "paypal_client_id_encrypted",
    "paypal_client_secret": "paypal_client_secret_encrypted",
    "sendcloud_public_key": "sendcloud_public_key_encrypted",
    "sendcloud_private_key": "sendcloud_private_key_encrypted",
    "brevo_api_key": "brevo_api_key_encrypted",
}


class WebsiteSetting(models.Model):
    """The store's single settings row.

    Provider credentials are kept as ``iv:tag:data`` ciphertexts produced by
    ``apps.site_settings.encryption``; nothing in this table is plaintext
    secret material.
    """

    store_name = models.TextField(default="")
    domain = models.TextField(null=True, blank=True)
    website_title = models.TextField(null=True, blank=True)
    website_description = models.TextField(null=True, blank=True)
    default_currency = models.CharField(max_length=3, default="EUR")
    logo_url = models.TextField(null=True, blank=True)
    logo_transparent_url = models.TextField(null=True, blank=True)

    stripe_secret_key_encrypted = models.TextField(null=True, blank=True)
    stripe_publishable_key_encrypted = models.TextField(null=True, blank=True)
    paypal_client_id_encrypted = models.TextField(null=True, blank=True)
    paypal_client_secret_encrypted = models.TextField(null=True, blank=True)
    sendcloud_public_key_encrypted = models.TextField(null=True, blank=True)
    sendcloud_private_key_encrypted = models.TextField(null=True, blank=True)
    brevo_api_key_encrypted = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "website_settings"

    def __str__(self):
        return self.store_name or "settings"
