"""Support ticket workflow between clippers and admins."""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from backend.exceptions import ConflictError, ForbiddenError, NotFoundError, ServiceError
from notifications.models import Notification
from notifications.services import notify, notify_admins

from .models import SupportTicket

LOGGER = logging.getLogger(__name__)

Status = SupportTicket.Status
CLOSED_STATUSES = (Status.RESOLVED, Status.CLOSED)


class TicketNotFound(NotFoundError):
    default_code = "TICKET_NOT_FOUND"


def _lock_ticket(ticket_id) -> SupportTicket:
    ticket = SupportTicket.objects.select_for_update().filter(pk=ticket_id).first()
    if ticket is None:
        raise TicketNotFound("Ticket not found.")
    return ticket


def create_ticket(user, category: str, subject: str, message: str, image_url: Optional[str] = None) -> SupportTicket:
    ticket = SupportTicket.objects.create(
        user=user,
        category=category,
        subject=subject.strip(),
        message=message.strip(),
        image_url=image_url or None,
    )
    LOGGER.info("Support ticket created", extra={"ticket_id": ticket.pk, "user_id": user.pk})
    notify_admins(
        Notification.Type.SYSTEM_UPDATE,
        "New support ticket",
        f"{user.username} opened a {ticket.get_category_display()} ticket: {ticket.subject}",
        {"ticket_id": ticket.pk},
    )
    return ticket


def admin_update_ticket(ticket_id, admin, *, status: Optional[str] = None,
                        response: Optional[str] = None) -> SupportTicket:
    """Set the status and/or respond. Responding to an OPEN ticket moves it to IN_PROGRESS."""
    response = (response or "").strip() or None
    if status is None and response is None:
        raise ServiceError("Provide a status or a response.", code="NOTHING_TO_UPDATE")

    with transaction.atomic():
        ticket = _lock_ticket(ticket_id)
        if response is not None:
            ticket.admin_response = response
            ticket.responded_at = timezone.now()
            ticket.responded_by = admin
            if status is None and ticket.status == Status.OPEN:
                ticket.status = Status.IN_PROGRESS
        if status is not None:
            ticket.status = status
        ticket.save()

    LOGGER.info(
        "Support ticket updated",
        extra={"ticket_id": ticket.pk, "status": ticket.status, "responded": response is not None, "actor_id": admin.pk},
    )
    if response is not None:
        title, message = "Support replied", f'We responded to your ticket "{ticket.subject}".'
    else:
        title, message = "Ticket updated", f'Your ticket "{ticket.subject}" is now {ticket.get_status_display()}.'
    notify(ticket.user, Notification.Type.SYSTEM_UPDATE, title, message, {"ticket_id": ticket.pk})
    return ticket


def user_reply(ticket_id, user, reply: str) -> SupportTicket:
    """One follow-up from the ticket owner after an admin response; reopens the ticket."""
    with transaction.atomic():
        ticket = _lock_ticket(ticket_id)
        if ticket.user_id != user.pk:
            raise ForbiddenError("You can only reply to your own tickets.")
        if ticket.status in CLOSED_STATUSES:
            raise ServiceError("This ticket is closed.", code="TICKET_CLOSED")
        if not ticket.admin_response:
            raise ServiceError("You can reply once support has responded.", code="AWAITING_RESPONSE")
        if ticket.user_reply:
            raise ConflictError("You have already replied to this ticket.", code="ALREADY_REPLIED")
        ticket.user_reply = reply.strip()
        ticket.user_reply_at = timezone.now()
        ticket.status = Status.OPEN
        ticket.save()

    LOGGER.info("Support ticket reply", extra={"ticket_id": ticket.pk, "user_id": user.pk})
    notify_admins(
        Notification.Type.SYSTEM_UPDATE,
        "Ticket reply",
        f'{user.username} replied to "{ticket.subject}".',
        {"ticket_id": ticket.pk},
    )
    return ticket
