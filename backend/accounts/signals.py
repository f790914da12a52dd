import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import User

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def user_created(sender, instance, created, **kwargs):
    """
    Log new accounts and keep staff access in step with the admin role
    """
    if not created:
        return

    logger.info(f"New user created: {instance.username} ({instance.email}) role={instance.role}")

    if instance.role == User.Role.ADMIN and not instance.is_staff:
        User.objects.filter(pk=instance.pk).update(is_staff=True)
        instance.is_staff = True
