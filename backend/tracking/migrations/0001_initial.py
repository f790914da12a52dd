from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('submissions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ViewTracking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('views', models.BigIntegerField()),
                ('platform', models.CharField(choices=[('TIKTOK', 'TikTok'), ('YOUTUBE', 'YouTube'), ('INSTAGRAM', 'Instagram'), ('TWITTER', 'Twitter / X')], max_length=16)),
                ('date', models.DateField()),
                ('scraped_at', models.DateTimeField(db_index=True)),
                ('clip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='view_tracking', to='submissions.clip')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='view_snapshots', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'view_tracking',
                'ordering': ('-scraped_at',),
                'indexes': [
                    models.Index(fields=['clip', '-scraped_at'], name='view_tracking_clip_idx'),
                    models.Index(fields=['user', 'date'], name='view_tracking_user_date'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CronJobLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('job_name', models.CharField(db_index=True, max_length=64)),
                ('status', models.CharField(choices=[('RUNNING', 'Running'), ('SUCCESS', 'Success'), ('PARTIAL_SUCCESS', 'Partial success'), ('FAILED', 'Failed'), ('SKIPPED', 'Skipped')], default='RUNNING', max_length=16)),
                ('started_at', models.DateTimeField()),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('duration_seconds', models.FloatField(blank=True, null=True)),
                ('clips_processed', models.PositiveIntegerField(default=0)),
                ('clips_successful', models.PositiveIntegerField(default=0)),
                ('clips_failed', models.PositiveIntegerField(default=0)),
                ('earnings_calculated', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('details', models.JSONField(blank=True, default=dict)),
                ('error_message', models.TextField(blank=True, null=True)),
            ],
            options={
                'db_table': 'cron_job_log',
                'ordering': ('-started_at',),
                'indexes': [models.Index(fields=['job_name', 'status', '-started_at'], name='cron_log_job_status')],
            },
        ),
    ]
