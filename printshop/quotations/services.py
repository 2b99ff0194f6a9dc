import logging

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from printshop.core.exceptions import ConflictError
from .models import QuotationRequest

logger = logging.getLogger(__name__)

INVOICE_NUMBER_ATTEMPTS = 5


def next_invoice_number(on_date):
    """INV-YYYYMM-NNNN, numbered per month; the sequence widens past 9999"""
    prefix = f"INV-{on_date:%Y%m}-"
    numbers = (QuotationRequest.objects
               .filter(invoice_number__startswith=prefix)
               .values_list('invoice_number', flat=True))
    suffixes = (number[len(prefix):] for number in numbers)
    sequence = max((int(s) for s in suffixes if s.isdigit()), default=0) + 1
    return f"{prefix}{sequence:04d}"


def generate_invoice(quotation_id):
    """Assign an invoice number and date to a quotation, once"""
    with transaction.atomic():
        quotation = QuotationRequest.objects.select_for_update().filter(pk=quotation_id).first()
        if quotation is None:
            raise NotFound('Quotation not found')
        if quotation.invoice_number:
            raise ConflictError('Invoice already generated for this quotation')

        today = timezone.localdate()
        quotation.invoice_date = today
        for attempt in range(1, INVOICE_NUMBER_ATTEMPTS + 1):
            quotation.invoice_number = next_invoice_number(today)
            try:
                with transaction.atomic():
                    quotation.save(update_fields=['invoice_number', 'invoice_date', 'updated_at'])
                break
            except IntegrityError:
                logger.warning(f"Invoice number {quotation.invoice_number} already taken "
                               f"(attempt {attempt}/{INVOICE_NUMBER_ATTEMPTS})")
        else:
            raise ConflictError('Could not allocate an invoice number, please try again')

    logger.info(f"Generated invoice {quotation.invoice_number} for quotation {quotation.id}")
    return quotation
