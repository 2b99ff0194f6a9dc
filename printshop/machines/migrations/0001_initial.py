import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Machine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('type', models.CharField(choices=[('offset', 'Offset'), ('digital', 'Digital'), ('flexo', 'Flexo'), ('screen', 'Screen'), ('letterpress', 'Letterpress')], max_length=20)),
                ('description', models.TextField(blank=True)),
                ('color_capacity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('max_sheet_size', models.CharField(blank=True, max_length=50)),
                ('status', models.CharField(choices=[('active', 'Active'), ('maintenance', 'Maintenance'), ('offline', 'Offline')], default='active', max_length=20)),
                ('operator_name', models.CharField(blank=True, max_length=200)),
                ('operator_email', models.EmailField(blank=True, max_length=254)),
                ('is_available', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'machines',
                'ordering': ['name'],
            },
        ),
    ]
