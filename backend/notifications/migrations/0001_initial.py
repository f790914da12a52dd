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
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('SUBMISSION_APPROVED', 'Submission approved'), ('SUBMISSION_REJECTED', 'Submission rejected'), ('PAYOUT_REQUESTED', 'Payout requested'), ('PAYOUT_PROCESSED', 'Payout processed'), ('CAMPAIGN_COMPLETED', 'Campaign completed'), ('NEW_CAMPAIGN_AVAILABLE', 'New campaign available'), ('SYSTEM_UPDATE', 'System update')], max_length=32)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('data', models.JSONField(blank=True, default=dict)),
                ('read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notification',
                'ordering': ('-created_at',),
                'indexes': [models.Index(fields=['user', 'read', '-created_at'], name='notification_user_read_idx')],
            },
        ),
    ]
