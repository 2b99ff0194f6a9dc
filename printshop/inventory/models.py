from django.db import models


class InventoryItem(models.Model):
    """Paper stock held for a party, one row per paper type and GSM"""
    party = models.ForeignKey('parties.Party', on_delete=models.CASCADE, related_name='inventory_items')
    paper_type = models.ForeignKey('jobsheets.PaperType', on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_items')
    paper_type_name = models.CharField(max_length=100, blank=True)
    gsm = models.PositiveIntegerField(null=True, blank=True)
    # Negative when more sheets were used than received (party is in stock debt)
    current_quantity = models.IntegerField(default=0)
    reserved_quantity = models.IntegerField(default=0)
    last_updated = models.DateTimeField(auto_now=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.party} - {self.paper_type_name or 'Unknown'} {self.gsm or ''}".strip()

    @property
    def available_quantity(self):
        return self.current_quantity - self.reserved_quantity

    class Meta:
        db_table = 'inventory_items'
        ordering = ['-created_at']
        unique_together = [['party', 'paper_type', 'gsm']]


class InventoryTransaction(models.Model):
    """Stock movements; total_sheets is signed (negative only for 'out')"""
    TRANSACTION_TYPE_CHOICES = [
        ('in', 'Stock In'),
        ('out', 'Stock Out'),
        ('adjustment', 'Adjustment'),
        ('reserved', 'Reserved'),
        ('released', 'Released'),
    ]
    UNIT_TYPE_CHOICES = [
        ('sheets', 'Sheets'),
        ('packets', 'Packets'),
        ('reams', 'Reams'),
    ]

    inventory_item = models.ForeignKey(InventoryItem, on_delete=models.CASCADE, related_name='transactions')
    party = models.ForeignKey('parties.Party', on_delete=models.CASCADE, related_name='inventory_transactions')
    paper_type = models.ForeignKey('jobsheets.PaperType', on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_transactions')
    gsm = models.PositiveIntegerField(null=True, blank=True)
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    quantity = models.PositiveIntegerField()
    unit_type = models.CharField(max_length=20, choices=UNIT_TYPE_CHOICES, default='sheets')
    unit_size = models.PositiveIntegerField(default=1)
    total_sheets = models.IntegerField()
    description = models.TextField(blank=True)
    reference_job_sheet = models.ForeignKey('jobsheets.JobSheet', on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_transactions')
    balance_after = models.IntegerField(default=0)
    created_by = models.CharField(max_length=200, blank=True, default='Admin')
    is_deleted = models.BooleanField(default=False)
    deletion_reason = models.TextField(blank=True, null=True)
    deleted_by = models.CharField(max_length=200, blank=True, null=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.transaction_type} {self.total_sheets} sheets ({self.inventory_item_id})"

    class Meta:
        db_table = 'inventory_transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['inventory_item', 'is_deleted'], name='inv_txn_item_deleted_idx'),
        ]
