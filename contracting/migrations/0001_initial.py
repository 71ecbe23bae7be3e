import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

PROJECT_STATUSES = [
    ("Pending", "Pending"),
    ("Confirmed", "Confirmed"),
    ("Accepted", "Accepted"),
    ("Rejected", "Rejected"),
    ("In Progress", "In Progress"),
    ("Completed", "Completed"),
]


def shared_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("budget", models.DecimalField(decimal_places=2, max_digits=14)),
        ("status", models.CharField(choices=PROJECT_STATUSES, db_index=True, default="Pending", max_length=16)),
        ("progress_note", models.TextField(blank=True)),
        ("conversation", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="chat.conversation")),
        ("property", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="properties.property")),
        ("provider", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
        ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to=settings.AUTH_USER_MODEL)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("chat", "0001_initial"),
        ("properties", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ConstructionRequest",
            fields=shared_fields() + [
                ("project_type", models.CharField(max_length=120)),
                ("description", models.TextField()),
                ("start_date", models.DateField(blank=True, null=True)),
                ("end_date", models.DateField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [models.Index(fields=["provider", "status"], name="idx_construction_provider")],
            },
        ),
        migrations.CreateModel(
            name="RenovationRequest",
            fields=shared_fields() + [
                ("service_category", models.CharField(max_length=120)),
                ("detailed_description", models.TextField()),
                ("preferred_date", models.DateField(blank=True, null=True)),
                ("photos", models.JSONField(blank=True, default=list)),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [models.Index(fields=["provider", "status"], name="idx_renovation_provider")],
            },
        ),
    ]
