from django.apps import AppConfig


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
    verbose_name = "Users and providers"

    def ready(self):
        # Profile creation and display-name cache invalidation
        from . import signals  # noqa: F401
