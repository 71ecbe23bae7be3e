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
            name="MarketplaceListing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(db_index=True, max_length=160)),
                ("description", models.TextField()),
                ("price", models.DecimalField(decimal_places=2, max_digits=14)),
                ("currency", models.CharField(default="PKR", max_length=8)),
                ("category", models.CharField(db_index=True, max_length=80)),
                ("location", models.CharField(max_length=200)),
                ("city", models.CharField(blank=True, db_index=True, max_length=120)),
                ("condition", models.CharField(choices=[("new", "New"), ("used", "Used"), ("refurbished", "Refurbished")], default="new", max_length=16)),
                ("status", models.CharField(choices=[("pending", "Pending Approval"), ("active", "Active"), ("sold", "Sold"), ("removed", "Removed")], db_index=True, default="pending", max_length=16)),
                ("images", models.JSONField(blank=True, default=list)),
                ("cover_image", models.CharField(blank=True, max_length=500)),
                ("views", models.PositiveIntegerField(default=0)),
                ("favorites_count", models.IntegerField(default=0)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_reason", models.CharField(blank=True, max_length=240)),
                ("seller", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="marketplace_listings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["category", "status"], name="idx_listing_cat_status"),
                    models.Index(fields=["seller", "status"], name="idx_listing_seller_status"),
                    models.Index(fields=["price"], name="idx_listing_price"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Offer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("offer_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("message", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("accepted", "Accepted"), ("rejected", "Rejected"), ("withdrawn", "Withdrawn")], db_index=True, default="pending", max_length=16)),
                ("buyer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="marketplace_offers", to=settings.AUTH_USER_MODEL)),
                ("listing", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="offers", to="marketplace.marketplacelisting")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["listing", "created_at"], name="idx_offer_listing_created"),
                    models.Index(fields=["buyer", "created_at"], name="idx_offer_buyer_created"),
                ],
            },
        ),
    ]
