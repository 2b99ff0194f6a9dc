from decimal import Decimal

from django.db import models
from django.utils import timezone


class PaperType(models.Model):
    name = models.CharField(max_length=100, unique=True)
    gsm = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} ({self.gsm} gsm)" if self.gsm else self.name

    class Meta:
        db_table = 'paper_types'
        ordering = ['name']


class JobSheet(models.Model):
    """A print job: what to print, for whom, what it costs and where it runs"""
    JOB_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('assigned', 'Assigned'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    job_date = models.DateField(default=timezone.localdate)
    party = models.ForeignKey('parties.Party', on_delete=models.SET_NULL, null=True, blank=True, related_name='job_sheets')
    party_name = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    plate = models.PositiveIntegerField(default=0)
    size = models.CharField(max_length=50, blank=True)
    sq_inch = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    paper_sheet = models.PositiveIntegerField(default=0)
    imp = models.PositiveIntegerField(default=0)
    rate = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    printing = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    uv = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    baking = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    gsm = models.PositiveIntegerField(null=True, blank=True)
    paper_type = models.ForeignKey(PaperType, on_delete=models.SET_NULL, null=True, blank=True, related_name='job_sheets')
    job_type = models.CharField(max_length=50, blank=True)
    file_url = models.URLField(max_length=500, blank=True)
    paper_provided_by_party = models.BooleanField(default=False)
    used_from_inventory = models.BooleanField(default=False)
    inventory_item = models.ForeignKey('inventory.InventoryItem', on_delete=models.SET_NULL, null=True, blank=True, related_name='job_sheets')
    party_balance_before = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    party_balance_after = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    # Operator workflow
    machine = models.ForeignKey('machines.Machine', on_delete=models.SET_NULL, null=True, blank=True, related_name='job_sheets')
    job_status = models.CharField(max_length=20, choices=JOB_STATUS_CHOICES, default='pending')
    assigned_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    operator_notes = models.TextField(blank=True)

    is_deleted = models.BooleanField(default=False)
    deletion_reason = models.TextField(blank=True, null=True)
    deleted_by = models.CharField(max_length=200, blank=True, null=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Job Sheet #{self.id} - {self.party_name or 'Walk-in'}"

    @property
    def total_cost(self):
        return (self.printing or Decimal('0.00')) + (self.uv or Decimal('0.00')) + (self.baking or Decimal('0.00'))

    class Meta:
        db_table = 'job_sheets'
        ordering = ['-id']
        indexes = [
            models.Index(fields=['machine', 'job_status'], name='job_sheets_machine_status_idx'),
            models.Index(fields=['is_deleted'], name='job_sheets_deleted_idx'),
        ]


class JobSheetNote(models.Model):
    job_sheet = models.ForeignKey(JobSheet, on_delete=models.CASCADE, related_name='notes')
    note = models.TextField()
    author = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Note on #{self.job_sheet_id} by {self.author or 'unknown'}"

    class Meta:
        db_table = 'job_sheet_notes'
        ordering = ['-created_at']
