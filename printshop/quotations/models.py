import uuid

from django.db import models


class QuotationRequest(models.Model):
    """Public quote request submitted from the website form"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('reviewing', 'Reviewing'),
        ('quoted', 'Quoted'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
        ('completed', 'Completed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client_name = models.CharField(max_length=200)
    client_email = models.EmailField()
    client_phone = models.CharField(max_length=20, blank=True)
    company_name = models.CharField(max_length=200, blank=True)
    project_title = models.CharField(max_length=255)
    project_description = models.TextField(blank=True)
    print_type = models.CharField(max_length=50)
    paper_type = models.CharField(max_length=50)
    paper_size = models.CharField(max_length=50)
    quantity = models.PositiveIntegerField()
    pages = models.PositiveIntegerField(default=1)
    color_type = models.CharField(max_length=50)
    binding_type = models.CharField(max_length=50, default='none')
    lamination = models.CharField(max_length=50, default='none')
    folding = models.CharField(max_length=50, default='none')
    cutting = models.CharField(max_length=50, default='standard')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    estimated_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    final_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    invoice_number = models.CharField(max_length=30, unique=True, null=True, blank=True)
    invoice_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.project_title} ({self.client_name})"

    class Meta:
        db_table = 'quotation_requests'
        ordering = ['-created_at']


class QuotationNote(models.Model):
    quotation = models.ForeignKey(QuotationRequest, on_delete=models.CASCADE, related_name='notes')
    note = models.TextField()
    created_by = models.CharField(max_length=200, default='Admin')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Note on {self.quotation_id} by {self.created_by}"

    class Meta:
        db_table = 'quotation_notes'
        ordering = ['-created_at']
