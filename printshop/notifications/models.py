from django.db import models


class OperatorNotification(models.Model):
    """In-app message for the operator of a machine"""
    TYPE_CHOICES = [
        ('job_assignment', 'Job Assignment'),
        ('job_status_update', 'Job Status Update'),
        ('job_reassignment', 'Job Reassignment'),
        ('general', 'General'),
    ]

    machine = models.ForeignKey('machines.Machine', on_delete=models.CASCADE, related_name='notifications')
    job_sheet = models.ForeignKey('jobsheets.JobSheet', on_delete=models.SET_NULL, null=True, blank=True, related_name='notifications')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES, default='general')
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'operator_notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['machine', 'read'], name='op_notif_machine_read_idx'),
        ]


class EmailNotification(models.Model):
    """Outgoing email queued for the email worker"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('sending', 'Sending'),
        ('sent', 'Sent'),
        ('failed', 'Failed'),
    ]

    notification = models.ForeignKey(OperatorNotification, on_delete=models.SET_NULL, null=True, blank=True, related_name='emails')
    to_email = models.EmailField()
    subject = models.CharField(max_length=255)
    html_content = models.TextField()
    text_content = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    error_message = models.TextField(blank=True)
    attempts = models.PositiveIntegerField(default=0)
    claimed_at = models.DateTimeField(null=True, blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.subject} -> {self.to_email} ({self.status})"

    class Meta:
        db_table = 'email_notifications'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='email_notif_status_idx'),
        ]
