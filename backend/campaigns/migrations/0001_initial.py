from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Campaign',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('creator', models.CharField(help_text='Brand or agency running the campaign', max_length=200)),
                ('budget', models.DecimalField(decimal_places=2, max_digits=12)),
                ('spent', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('reserved_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Part of the budget held back from clip earnings (fees, bonuses)', max_digits=12)),
                ('payout_rate', models.DecimalField(decimal_places=2, help_text='USD per 1,000 views', max_digits=10)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('SCHEDULED', 'Scheduled'), ('ACTIVE', 'Active'), ('PAUSED', 'Paused'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], db_index=True, default='DRAFT', max_length=16)),
                ('start_date', models.DateTimeField(blank=True, null=True)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('target_platforms', models.JSONField(blank=True, default=list)),
                ('requirements', models.JSONField(blank=True, default=list)),
                ('featured_image', models.URLField(blank=True, max_length=500, null=True)),
                ('content_folder_url', models.URLField(blank=True, max_length=500, null=True)),
                ('hidden', models.BooleanField(default=False)),
                ('is_test', models.BooleanField(default=False)),
                ('team_update', models.TextField(blank=True, null=True)),
                ('team_update_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('completion_reason', models.CharField(blank=True, max_length=500, null=True)),
                ('budget_reached_at', models.DateTimeField(blank=True, null=True)),
                ('budget_reached_views', models.BigIntegerField(blank=True, null=True)),
                ('client_access_token', models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_campaigns', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'campaign',
                'ordering': ('-created_at',),
                'indexes': [
                    models.Index(fields=['status', '-created_at'], name='campaign_status_idx'),
                    models.Index(fields=['deleted_at'], name='campaign_deleted_idx'),
                ],
            },
        ),
    ]
