from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    name = "apps.payments"
    label = "payments"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from django.db.models.signals import post_save

        from apps.site_settings.models import WebsiteSetting

        from .providers import drop_cached_clients

        post_save.connect(drop_cached_clients, sender=WebsiteSetting, dispatch_uid="payments.drop_cached_clients")
