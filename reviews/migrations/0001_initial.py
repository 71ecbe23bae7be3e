import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("target_type", models.CharField(choices=[("property", "Property"), ("construction", "Construction project"), ("renovation", "Renovation project"), ("provider", "Service provider"), ("listing", "Marketplace listing")], max_length=16)),
                ("target_id", models.PositiveBigIntegerField()),
                ("rating", models.PositiveSmallIntegerField()),
                ("comment", models.TextField()),
                ("author", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["target_type", "target_id", "created_at"], name="idx_review_target")],
                "constraints": [
                    models.UniqueConstraint(fields=("author", "target_type", "target_id"), name="uniq_review_author_target"),
                    models.CheckConstraint(condition=models.Q(("rating__gte", 1), ("rating__lte", 5)), name="ck_review_rating_1_5"),
                ],
            },
        ),
    ]
