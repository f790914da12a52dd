from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


PLATFORM_CHOICES = [('TIKTOK', 'TikTok'), ('YOUTUBE', 'YouTube'), ('INSTAGRAM', 'Instagram'), ('TWITTER', 'Twitter / X')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('campaigns', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Clip',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url', models.URLField(max_length=500)),
                ('platform', models.CharField(choices=PLATFORM_CHOICES, max_length=16)),
                ('title', models.CharField(blank=True, default='', max_length=300)),
                ('views', models.BigIntegerField(default=0)),
                ('likes', models.BigIntegerField(default=0)),
                ('shares', models.BigIntegerField(default=0)),
                ('earnings', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('INACTIVE', 'Inactive')], default='ACTIVE', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='clips', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'clip',
                'ordering': ('-created_at',),
                'indexes': [models.Index(fields=['user', '-created_at'], name='clip_user_idx')],
            },
        ),
        migrations.CreateModel(
            name='ClipSubmission',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('clip_url', models.URLField(max_length=500)),
                ('platform', models.CharField(choices=PLATFORM_CHOICES, max_length=16)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected'), ('PAID', 'Paid')], db_index=True, default='PENDING', max_length=16)),
                ('rejection_reason', models.CharField(blank=True, max_length=500, null=True)),
                ('initial_views', models.BigIntegerField(default=0)),
                ('final_earnings', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('payout_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('campaign', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='submissions', to='campaigns.campaign')),
                ('clip', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='submission', to='submissions.clip')),
                ('reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_submissions', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='submissions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'clip_submission',
                'ordering': ('-created_at',),
                'indexes': [
                    models.Index(fields=['campaign', 'status'], name='submission_campaign_status'),
                    models.Index(fields=['user', '-created_at'], name='submission_user_idx'),
                ],
                'constraints': [models.UniqueConstraint(fields=('campaign', 'clip_url'), name='unique_campaign_clip_url')],
            },
        ),
    ]
