"""Drains the pending email queue"""
import logging
import time
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from . import mailer
from .models import EmailNotification

logger = logging.getLogger(__name__)


def claim_pending_emails(limit):
    """
    Mark up to `limit` queued emails as sending and return them, oldest
    first. Rows another run holds are skipped; claims older than
    EMAIL_WORKER_CLAIM_TIMEOUT_SECONDS are taken over.
    """
    now = timezone.now()
    stale = now - timedelta(seconds=settings.EMAIL_WORKER_CLAIM_TIMEOUT_SECONDS)
    with transaction.atomic():
        ids = list(
            EmailNotification.objects.select_for_update(skip_locked=True)
            .filter(Q(status='pending') | Q(status='sending', claimed_at__lt=stale))
            .order_by('created_at', 'id')
            .values_list('id', flat=True)[:limit]
        )
        EmailNotification.objects.filter(pk__in=ids).update(status='sending', claimed_at=now)
    return list(EmailNotification.objects.filter(pk__in=ids).order_by('created_at', 'id'))


def mark_sent(email):
    email.status = 'sent'
    email.sent_at = timezone.now()
    email.error_message = ''
    email.attempts += 1
    email.save(update_fields=['status', 'sent_at', 'error_message', 'attempts'])


def mark_failed(email, error):
    email.status = 'failed'
    email.error_message = error or 'Unknown error'
    email.attempts += 1
    email.save(update_fields=['status', 'error_message', 'attempts'])


def process_pending_emails(limit=None):
    """
    Send up to `limit` pending emails, oldest first, pausing between sends.

    Returns a summary dict suitable for the worker endpoint response.
    """
    limit = limit or settings.EMAIL_WORKER_BATCH_SIZE
    emails = claim_pending_emails(limit)
    if not emails:
        return {'message': 'No pending emails', 'processed': 0}

    success = failed = 0
    for index, email in enumerate(emails):
        if index:
            time.sleep(settings.EMAIL_WORKER_DELAY_SECONDS)
        try:
            ok, error = mailer.send_email(email.to_email, email.subject, email.html_content, email.text_content)
        except Exception as e:
            logger.exception(f"Unexpected error sending email {email.id}")
            ok, error = False, str(e)

        if ok:
            mark_sent(email)
            success += 1
        else:
            mark_failed(email, error)
            failed += 1

    logger.info(f"Email worker processed {len(emails)} emails: {success} sent, {failed} failed")
    return {
        'message': f"Processed {len(emails)} emails",
        'success': success,
        'failed': failed,
        'total': len(emails),
    }
