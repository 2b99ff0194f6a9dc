import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('parties', '0001_initial'),
        ('jobsheets', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='partytransaction',
            name='job_sheet',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='party_transactions', to='jobsheets.jobsheet'),
        ),
    ]
