from django.apps import AppConfig
from django.conf import settings
from django.db.models.signals import post_migrate


def create_default_admin(sender, **kwargs):
    """
    Ensure the configured admin account exists after migrations.
    """
    username = getattr(settings, "DEFAULT_ADMIN_USERNAME", "")
    password = getattr(settings, "DEFAULT_ADMIN_PASSWORD", "")
    if not username or not password:
        return

    from django.contrib.auth import get_user_model

    User = get_user_model()
    if not User.objects.filter(username=username).exists():
        User.objects.create_superuser(
            username=username,
            email=getattr(settings, "DEFAULT_ADMIN_EMAIL", "") or f"{username}@localhost",
            password=password,
            role=User.Role.ADMIN,
        )


class AccountConfig(AppConfig):
    """
    Account app configuration
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'accounts'
    verbose_name = 'Account Management'

    def ready(self):
        """
        App ready hook - wires signal handlers
        """
        import accounts.signals  # noqa: F401

        post_migrate.connect(create_default_admin, sender=self)
