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
            name="Property",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField()),
                ("listing_type", models.CharField(choices=[("rent", "For rent"), ("sale", "For sale")], db_index=True, max_length=8)),
                ("price", models.DecimalField(decimal_places=2, max_digits=14)),
                ("currency", models.CharField(default="PKR", max_length=8)),
                ("address", models.CharField(max_length=300)),
                ("city", models.CharField(blank=True, db_index=True, max_length=120)),
                ("bedrooms", models.PositiveSmallIntegerField(default=0)),
                ("bathrooms", models.PositiveSmallIntegerField(default=0)),
                ("area_sqft", models.PositiveIntegerField(blank=True, null=True)),
                ("furnished", models.BooleanField(default=False)),
                ("parking", models.BooleanField(default=False)),
                ("status", models.CharField(choices=[("pending", "Pending review"), ("published", "Published"), ("suspended", "Suspended")], db_index=True, default="published", max_length=16)),
                ("views", models.PositiveIntegerField(default=0)),
                ("favorites_count", models.IntegerField(default=0)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="properties", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "properties",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status", "listing_type", "created_at"], name="idx_property_browse")],
            },
        ),
        migrations.CreateModel(
            name="RentalRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("duration_months", models.PositiveSmallIntegerField(default=12)),
                ("budget", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("move_in_date", models.DateField(blank=True, null=True)),
                ("message", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("Pending", "Pending"), ("Confirmed", "Confirmed"), ("Accepted", "Accepted"), ("Rejected", "Rejected"), ("Paid", "Paid"), ("Completed", "Completed")], db_index=True, default="Pending", max_length=16)),
                ("landlord", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="received_rental_requests", to=settings.AUTH_USER_MODEL)),
                ("property", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="rental_requests", to="properties.property")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="rental_requests", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="BuySellRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("offer_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("message", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("Pending", "Pending"), ("Confirmed", "Confirmed"), ("Accepted", "Accepted"), ("Rejected", "Rejected"), ("Paid", "Paid"), ("Cancelled", "Cancelled"), ("Completed", "Completed")], db_index=True, default="Pending", max_length=16)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="received_buy_sell_requests", to=settings.AUTH_USER_MODEL)),
                ("property", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="buy_sell_requests", to="properties.property")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="buy_sell_requests", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
