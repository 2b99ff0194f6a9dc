from django.db import models
from decimal import Decimal


class Party(models.Model):
    """Customers of the print shop with a running account balance"""
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    # Positive balance: the party has paid in advance. Negative: the party owes.
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    credit_limit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_orders = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_payments = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'parties'
        ordering = ['-created_at']
        verbose_name_plural = 'parties'


class PartyTransaction(models.Model):
    """Ledger rows; every row moves the party balance by its delta"""
    TYPE_CHOICES = [
        ('payment', 'Payment'),
        ('order', 'Order'),
        ('adjustment', 'Adjustment'),
    ]

    party = models.ForeignKey(Party, on_delete=models.CASCADE, related_name='transactions')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    job_sheet = models.ForeignKey('jobsheets.JobSheet', on_delete=models.SET_NULL, null=True, blank=True, related_name='party_transactions')
    created_by = models.CharField(max_length=200, blank=True, default='Admin')
    is_deleted = models.BooleanField(default=False)
    deletion_reason = models.TextField(blank=True, null=True)
    deleted_by = models.CharField(max_length=200, blank=True, null=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.party.name} - {self.type} - {self.amount}"

    class Meta:
        db_table = 'party_transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['party', 'is_deleted'], name='party_txn_party_deleted_idx'),
            models.Index(fields=['-created_at'], name='party_txn_created_idx'),
        ]
