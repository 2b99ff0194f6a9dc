import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('parties', '0001_initial'),
        ('jobsheets', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('paper_type_name', models.CharField(blank=True, max_length=100)),
                ('gsm', models.PositiveIntegerField(blank=True, null=True)),
                ('current_quantity', models.IntegerField(default=0)),
                ('reserved_quantity', models.IntegerField(default=0)),
                ('last_updated', models.DateTimeField(auto_now=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('paper_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_items', to='jobsheets.papertype')),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory_items', to='parties.party')),
            ],
            options={
                'db_table': 'inventory_items',
                'ordering': ['-created_at'],
                'unique_together': {('party', 'paper_type', 'gsm')},
            },
        ),
        migrations.CreateModel(
            name='InventoryTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('gsm', models.PositiveIntegerField(blank=True, null=True)),
                ('transaction_type', models.CharField(choices=[('in', 'Stock In'), ('out', 'Stock Out'), ('adjustment', 'Adjustment'), ('reserved', 'Reserved'), ('released', 'Released')], max_length=20)),
                ('quantity', models.PositiveIntegerField()),
                ('unit_type', models.CharField(choices=[('sheets', 'Sheets'), ('packets', 'Packets'), ('reams', 'Reams')], default='sheets', max_length=20)),
                ('unit_size', models.PositiveIntegerField(default=1)),
                ('total_sheets', models.IntegerField()),
                ('description', models.TextField(blank=True)),
                ('balance_after', models.IntegerField(default=0)),
                ('created_by', models.CharField(blank=True, default='Admin', max_length=200)),
                ('is_deleted', models.BooleanField(default=False)),
                ('deletion_reason', models.TextField(blank=True, null=True)),
                ('deleted_by', models.CharField(blank=True, max_length=200, null=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('inventory_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transactions', to='inventory.inventoryitem')),
                ('paper_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_transactions', to='jobsheets.papertype')),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory_transactions', to='parties.party')),
                ('reference_job_sheet', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_transactions', to='jobsheets.jobsheet')),
            ],
            options={
                'db_table': 'inventory_transactions',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['inventory_item', 'is_deleted'], name='inv_txn_item_deleted_idx')],
            },
        ),
    ]
