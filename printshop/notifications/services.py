"""Operator notifications and the email queue that mirrors them"""
import logging

from django.template.loader import render_to_string

from .models import EmailNotification, OperatorNotification

logger = logging.getLogger(__name__)


def _text_body(title, message, job_sheet):
    lines = [title, '', message]
    if job_sheet is not None:
        lines += ['', f"Job Sheet #{job_sheet.id} - {job_sheet.party_name or '-'}"]
    return '\n'.join(lines)


def queue_email(to_email, subject, html_content, text_content='', notification=None):
    """Add an email to the queue drained by the email worker"""
    email = EmailNotification.objects.create(
        notification=notification,
        to_email=to_email,
        subject=subject,
        html_content=html_content,
        text_content=text_content,
    )
    logger.debug(f"Queued email {email.id} to {to_email}: {subject}")
    return email


def notify_operator(machine, notification_type, title, message, job_sheet=None, data=None):
    """
    Create an in-app notification for the machine's operator and queue an
    email when the machine has an operator email.
    """
    notification = OperatorNotification.objects.create(
        machine=machine,
        job_sheet=job_sheet,
        type=notification_type,
        title=title,
        message=message,
        data=data or {},
    )

    if machine.operator_email:
        html = render_to_string('notifications/operator_email.html', {
            'title': title,
            'message': message,
            'machine': machine,
            'job_sheet': job_sheet,
        })
        queue_email(machine.operator_email, title, html, _text_body(title, message, job_sheet),
                    notification=notification)

    logger.info(f"Notified operator of machine {machine.id}: {title}")
    return notification
