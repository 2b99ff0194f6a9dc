import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('parties', '0001_initial'),
        ('machines', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PaperType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('gsm', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'paper_types',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='JobSheet',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('job_date', models.DateField(default=django.utils.timezone.localdate)),
                ('party_name', models.CharField(blank=True, max_length=200)),
                ('description', models.TextField(blank=True)),
                ('plate', models.PositiveIntegerField(default=0)),
                ('size', models.CharField(blank=True, max_length=50)),
                ('sq_inch', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('paper_sheet', models.PositiveIntegerField(default=0)),
                ('imp', models.PositiveIntegerField(default=0)),
                ('rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('printing', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('uv', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('baking', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('gsm', models.PositiveIntegerField(blank=True, null=True)),
                ('job_type', models.CharField(blank=True, max_length=50)),
                ('file_url', models.URLField(blank=True, max_length=500)),
                ('paper_provided_by_party', models.BooleanField(default=False)),
                ('used_from_inventory', models.BooleanField(default=False)),
                ('party_balance_before', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('party_balance_after', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('job_status', models.CharField(choices=[('pending', 'Pending'), ('assigned', 'Assigned'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('assigned_at', models.DateTimeField(blank=True, null=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('operator_notes', models.TextField(blank=True)),
                ('is_deleted', models.BooleanField(default=False)),
                ('deletion_reason', models.TextField(blank=True, null=True)),
                ('deleted_by', models.CharField(blank=True, max_length=200, null=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('machine', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='job_sheets', to='machines.machine')),
                ('paper_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='job_sheets', to='jobsheets.papertype')),
                ('party', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='job_sheets', to='parties.party')),
            ],
            options={
                'db_table': 'job_sheets',
                'ordering': ['-id'],
                'indexes': [models.Index(fields=['machine', 'job_status'], name='job_sheets_machine_status_idx'), models.Index(fields=['is_deleted'], name='job_sheets_deleted_idx')],
            },
        ),
        migrations.CreateModel(
            name='JobSheetNote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('note', models.TextField()),
                ('author', models.CharField(blank=True, max_length=200)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('job_sheet', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notes', to='jobsheets.jobsheet')),
            ],
            options={
                'db_table': 'job_sheet_notes',
                'ordering': ['-created_at'],
            },
        ),
    ]
