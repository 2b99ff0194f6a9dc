"""HTTP mail API client"""
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


def send_email(to_email, subject, html_content, text_content=''):
    """
    Send one email through the mail API.

    Returns (ok, error) where error is None on success.
    """
    if not settings.MAIL_API_URL:
        return False, 'Email service not configured'

    payload = {
        'from': settings.MAIL_FROM,
        'to': to_email,
        'subject': subject,
        'html': html_content,
    }
    if text_content:
        payload['text'] = text_content

    headers = {}
    if settings.MAIL_API_KEY:
        headers['Authorization'] = f'Bearer {settings.MAIL_API_KEY}'

    try:
        response = requests.post(settings.MAIL_API_URL, json=payload, headers=headers,
                                 timeout=settings.MAIL_API_TIMEOUT)
    except requests.RequestException as e:
        logger.error(f"Mail API request failed for {to_email}: {str(e)}")
        return False, str(e)

    if response.status_code >= 400:
        error = f"Mail API returned {response.status_code}: {response.text[:200]}"
        logger.error(f"Failed to send email to {to_email}: {error}")
        return False, error
    return True, None
