import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='QuotationRequest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('client_name', models.CharField(max_length=200)),
                ('client_email', models.EmailField(max_length=254)),
                ('client_phone', models.CharField(blank=True, max_length=20)),
                ('company_name', models.CharField(blank=True, max_length=200)),
                ('project_title', models.CharField(max_length=255)),
                ('project_description', models.TextField(blank=True)),
                ('print_type', models.CharField(max_length=50)),
                ('paper_type', models.CharField(max_length=50)),
                ('paper_size', models.CharField(max_length=50)),
                ('quantity', models.PositiveIntegerField()),
                ('pages', models.PositiveIntegerField(default=1)),
                ('color_type', models.CharField(max_length=50)),
                ('binding_type', models.CharField(default='none', max_length=50)),
                ('lamination', models.CharField(default='none', max_length=50)),
                ('folding', models.CharField(default='none', max_length=50)),
                ('cutting', models.CharField(default='standard', max_length=50)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('reviewing', 'Reviewing'), ('quoted', 'Quoted'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('completed', 'Completed')], default='pending', max_length=20)),
                ('estimated_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('final_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('invoice_number', models.CharField(blank=True, max_length=30, null=True, unique=True)),
                ('invoice_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'quotation_requests',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='QuotationNote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('note', models.TextField()),
                ('created_by', models.CharField(default='Admin', max_length=200)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('quotation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notes', to='quotations.quotationrequest')),
            ],
            options={
                'db_table': 'quotation_notes',
                'ordering': ['-created_at'],
            },
        ),
    ]
