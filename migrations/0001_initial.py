# Generated migration for the initial QRoyal schema

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import qroyal.tokens


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Business",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "token",
                    models.CharField(
                        default=qroyal.tokens.new_business_token,
                        editable=False,
                        max_length=64,
                        unique=True,
                        verbose_name="token",
                    ),
                ),
                ("name", models.CharField(max_length=120, verbose_name="name")),
                (
                    "public_name",
                    models.CharField(blank=True, max_length=120, verbose_name="public name"),
                ),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="email")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                (
                    "points_per_scan",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="points per scan",
                    ),
                ),
                (
                    "reward_threshold",
                    models.PositiveIntegerField(
                        default=5,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="reward threshold",
                    ),
                ),
                (
                    "reward_message",
                    models.CharField(blank=True, max_length=255, verbose_name="reward message"),
                ),
                ("qr_logo_url", models.URLField(blank=True, verbose_name="QR logo URL")),
                (
                    "qr_color",
                    models.CharField(
                        default="#000000",
                        max_length=7,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^#[0-9a-fA-F]{6}$", "Use a hex color such as #1a2b3c"
                            )
                        ],
                        verbose_name="QR color",
                    ),
                ),
                (
                    "qr_eye_shape",
                    models.CharField(
                        choices=[("square", "Square"), ("rounded", "Rounded")],
                        default="square",
                        max_length=20,
                        verbose_name="QR corner shape",
                    ),
                ),
                (
                    "qr_dot_style",
                    models.CharField(
                        choices=[("square", "Square"), ("dots", "Dots"), ("rounded", "Rounded")],
                        default="square",
                        max_length=20,
                        verbose_name="QR dot style",
                    ),
                ),
                ("qr_data_url", models.TextField(blank=True, verbose_name="QR image")),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, verbose_name="active"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "business",
                "verbose_name_plural": "businesses",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "token",
                    models.CharField(
                        default=qroyal.tokens.new_customer_token,
                        editable=False,
                        help_text="Opaque identity token encoded in the customer's QR code",
                        max_length=64,
                        unique=True,
                        verbose_name="token",
                    ),
                ),
                ("name", models.CharField(max_length=120, verbose_name="name")),
                (
                    "phone",
                    models.CharField(
                        blank=True,
                        max_length=32,
                        null=True,
                        unique=True,
                        verbose_name="phone number",
                    ),
                ),
                ("password", models.CharField(blank=True, max_length=128, verbose_name="password")),
                ("qr_data_url", models.TextField(blank=True, verbose_name="QR image")),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, verbose_name="active"),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "customer",
                "verbose_name_plural": "customers",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Discount",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=120, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                ("image_url", models.URLField(blank=True, verbose_name="image URL")),
                (
                    "expiry_date",
                    models.DateTimeField(blank=True, null=True, verbose_name="expires at"),
                ),
                ("active", models.BooleanField(default=True, verbose_name="active")),
                (
                    "percentage",
                    models.PositiveSmallIntegerField(blank=True, null=True, verbose_name="percentage"),
                ),
                (
                    "price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True, verbose_name="price"
                    ),
                ),
                (
                    "price_cutoff",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        verbose_name="minimum spend",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "business",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="discounts",
                        to="qroyal.business",
                        verbose_name="business",
                    ),
                ),
            ],
            options={
                "verbose_name": "discount",
                "verbose_name_plural": "discounts",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Membership",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("points", models.PositiveIntegerField(default=0, verbose_name="points")),
                (
                    "rewards_earned",
                    models.PositiveIntegerField(default=0, verbose_name="rewards earned"),
                ),
                (
                    "last_reward_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="last reward at"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="joined at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="qroyal.business",
                        verbose_name="business",
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="qroyal.customer",
                        verbose_name="customer",
                    ),
                ),
            ],
            options={
                "verbose_name": "membership",
                "verbose_name_plural": "memberships",
                "ordering": ["-updated_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("customer", "business"),
                        name="qroyal_unique_membership",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PointTransaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[("earn", "Earn"), ("reward", "Reward"), ("adjust", "Adjustment")],
                        max_length=20,
                        verbose_name="type",
                    ),
                ),
                (
                    "points",
                    models.IntegerField(
                        help_text="Positive for earn, negative for reward or correction",
                        verbose_name="points",
                    ),
                ),
                ("balance_after", models.PositiveIntegerField(verbose_name="balance after")),
                (
                    "description",
                    models.CharField(blank=True, max_length=200, verbose_name="description"),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
                (
                    "created_by",
                    models.CharField(blank=True, max_length=100, verbose_name="created by"),
                ),
                (
                    "membership",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transactions",
                        to="qroyal.membership",
                        verbose_name="membership",
                    ),
                ),
            ],
            options={
                "verbose_name": "point transaction",
                "verbose_name_plural": "point transactions",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["membership", "-created_at"],
                        name="qroyal_poin_members_5c1e0a_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="ProcessedEvent",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "nonce",
                    models.CharField(db_index=True, max_length=255, unique=True, verbose_name="nonce"),
                ),
                ("provider", models.CharField(db_index=True, max_length=50, verbose_name="source")),
                (
                    "processed_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        verbose_name="processed at",
                    ),
                ),
            ],
            options={
                "verbose_name": "processed event",
                "verbose_name_plural": "processed events",
                "db_table": "qroyal_processed_event",
                "indexes": [
                    models.Index(
                        fields=["provider", "processed_at"],
                        name="qroyal_proc_provide_8d2f4b_idx",
                    )
                ],
            },
        ),
    ]
