"""Helpers for creating in-app notifications.

Notification delivery is a side effect: failures are logged and swallowed so a
broken notification never rolls back the business operation that triggered it.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.db.models import Q

from .models import Notification

LOGGER = logging.getLogger(__name__)


def notify(user, type: str, title: str, message: str, data: Optional[Dict[str, Any]] = None) -> Optional[Notification]:
    try:
        with transaction.atomic():
            return Notification.objects.create(
                user=user,
                type=type,
                title=title,
                message=message,
                data=data or {},
            )
    except DatabaseError:
        LOGGER.exception(
            "Failed to create notification",
            extra={"user_id": getattr(user, "pk", None), "notification_type": type},
        )
        return None


def notify_users(users: Iterable, type: str, title: str, message: str,
                 data: Optional[Dict[str, Any]] = None) -> List[Notification]:
    users = list(users)
    if not users:
        return []
    try:
        with transaction.atomic():
            return Notification.objects.bulk_create(
                [
                    Notification(user=user, type=type, title=title, message=message, data=data or {})
                    for user in users
                ]
            )
    except DatabaseError:
        LOGGER.exception(
            "Failed to create notifications",
            extra={"recipient_count": len(users), "notification_type": type},
        )
        return []


def admin_users():
    User = get_user_model()
    return User.objects.filter(is_active=True).filter(Q(role=User.Role.ADMIN) | Q(is_superuser=True))


def notify_admins(type: str, title: str, message: str, data: Optional[Dict[str, Any]] = None) -> List[Notification]:
    return notify_users(admin_users(), type, title, message, data)
