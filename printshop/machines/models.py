from django.core.validators import MinValueValidator
from django.db import models


class Machine(models.Model):
    """Printing machines that job sheets are assigned to"""
    TYPE_CHOICES = [
        ('offset', 'Offset'),
        ('digital', 'Digital'),
        ('flexo', 'Flexo'),
        ('screen', 'Screen'),
        ('letterpress', 'Letterpress'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('maintenance', 'Maintenance'),
        ('offline', 'Offline'),
    ]

    name = models.CharField(max_length=100, unique=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    description = models.TextField(blank=True)
    color_capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    max_sheet_size = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    operator_name = models.CharField(max_length=200, blank=True)
    operator_email = models.EmailField(blank=True)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'machines'
        ordering = ['name']
