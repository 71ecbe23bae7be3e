import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

NOTIFICATION_TYPES = [
    ("service-request", "Service request"),
    ("admin", "Admin"),
    ("system", "System"),
    ("status-update", "Status update"),
    ("info", "Info"),
    ("success", "Success"),
    ("warning", "Warning"),
    ("error", "Error"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("type", models.CharField(choices=NOTIFICATION_TYPES, db_index=True, default="info", max_length=32)),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField(blank=True)),
                ("link", models.CharField(blank=True, max_length=300)),
                ("read", models.BooleanField(db_index=True, default=False)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("is_broadcast", models.BooleanField(default=False)),
                ("email_sent", models.BooleanField(default=False)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "read"], name="idx_notification_user_read"),
                    models.Index(fields=["user", "created_at"], name="idx_notification_user_created"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BroadcastJob",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField()),
                ("type", models.CharField(choices=NOTIFICATION_TYPES, default="admin", max_length=32)),
                ("link", models.CharField(blank=True, max_length=300)),
                ("audience", models.CharField(choices=[("all-users", "All users"), ("all-providers", "All approved providers"), ("single-uid", "Single user")], max_length=20)),
                ("single_uid", models.BigIntegerField(blank=True, null=True)),
                ("recipient_ids", models.JSONField(blank=True, default=list)),
                ("total", models.PositiveIntegerField(default=0)),
                ("sent", models.PositiveIntegerField(default=0)),
                ("batches", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=[("awaiting_confirmation", "Awaiting confirmation"), ("queued", "Queued"), ("running", "Running"), ("completed", "Completed"), ("failed", "Failed")], db_index=True, default="queued", max_length=24)),
                ("error", models.TextField(blank=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("finished_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="broadcast_jobs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
