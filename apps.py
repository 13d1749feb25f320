from django.apps import AppConfig


class QroyalConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "qroyal"
    verbose_name = "QRoyal - Loyalty Program"

    def ready(self):
        from django.db.backends.signals import connection_created

        from qroyal.signals.handlers import apply_statement_timeout

        connection_created.connect(
            apply_statement_timeout, dispatch_uid="qroyal_statement_timeout"
        )
