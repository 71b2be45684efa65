from django.apps import AppConfig


class SiteSettingsConfig(AppConfig):
    name = "apps.site_settings"
    label = "site_settings"
    default_auto_field = "django.db.models.BigAutoField"
