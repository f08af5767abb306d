import decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _timestamped() -> list[tuple[str, models.Field]]:  # type: ignore[type-arg]
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
        ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
    ]


def _money() -> models.DecimalField:  # type: ignore[type-arg]
    return models.DecimalField(
        decimal_places=2,
        default=decimal.Decimal("0"),
        max_digits=10,
        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("clubs", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                *_timestamped(),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True)),
                ("location", models.CharField(blank=True, max_length=255)),
                (
                    "visibility",
                    models.CharField(
                        choices=[("public", "Public"), ("campus", "Campus"), ("members", "Members")],
                        default="public",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("canceled", "Canceled"), ("archived", "Archived")],
                        db_index=True,
                        default="active",
                        max_length=10,
                    ),
                ),
                ("start", models.DateTimeField()),
                ("end", models.DateTimeField()),
                ("rsvp_open", models.DateTimeField(blank=True, null=True)),
                ("rsvp_close", models.DateTimeField(blank=True, null=True)),
                ("capacity", models.PositiveIntegerField(blank=True, help_text="Leave empty for unlimited", null=True)),
                ("tickets_sold_count", models.PositiveIntegerField(default=0)),
                (
                    "payment_mode",
                    models.CharField(
                        choices=[("free", "Free"), ("external", "External"), ("managed", "Managed")],
                        default="free",
                        max_length=10,
                    ),
                ),
                ("price", _money()),
                ("currency", models.CharField(blank=True, max_length=3)),
                ("canceled_at", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.TextField(blank=True)),
                (
                    "allowed_universities",
                    models.ManyToManyField(blank=True, related_name="restricted_events", to="accounts.university"),
                ),
                (
                    "club",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="events", to="clubs.club"
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["start"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("end__gt", models.F("start"))), name="event_end_after_start")
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketType",
            fields=[
                *_timestamped(),
                ("name", models.CharField(max_length=100)),
                ("price", _money()),
                ("capacity", models.PositiveIntegerField(blank=True, help_text="Leave empty for unlimited", null=True)),
                ("sold", models.PositiveIntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="ticket_types", to="events.event"
                    ),
                ),
            ],
            options={
                "ordering": ["price", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "name"), name="unique_ticket_type_name"),
                    models.CheckConstraint(
                        condition=models.Q(("capacity__isnull", True), ("sold__lte", models.F("capacity")), _connector="OR"),
                        name="ticket_type_sold_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RSVP",
            fields=[
                *_timestamped(),
                (
                    "status",
                    models.CharField(
                        choices=[("confirmed", "Confirmed"), ("canceled", "Canceled")],
                        db_index=True,
                        default="confirmed",
                        max_length=10,
                    ),
                ),
                ("canceled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="rsvps", to="events.event"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rsvps",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "RSVP",
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "confirmed")),
                        fields=("event", "user"),
                        name="unique_confirmed_rsvp",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                *_timestamped(),
                (
                    "quantity",
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("unit_price", models.DecimalField(decimal_places=2, default=decimal.Decimal("0"), max_digits=10)),
                ("total", models.DecimalField(decimal_places=2, default=decimal.Decimal("0"), max_digits=10)),
                ("currency", models.CharField(max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("awaiting_review", "Awaiting Review"),
                            ("paid", "Paid"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("receipt_url", models.URLField(blank=True, max_length=1024)),
                ("notes", models.TextField(blank=True)),
                ("rejected_reason", models.CharField(blank=True, max_length=64)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("payment_reference", models.CharField(blank=True, db_index=True, max_length=255)),
                (
                    "club",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="orders", to="clubs.club"
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="orders", to="events.event"
                    ),
                ),
                (
                    "reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "ticket_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="events.tickettype",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [models.CheckConstraint(condition=models.Q(("quantity__gte", 1)), name="order_quantity_positive")],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                *_timestamped(),
                (
                    "status",
                    models.CharField(
                        choices=[("valid", "Valid"), ("used", "Used")], db_index=True, default="valid", max_length=10
                    ),
                ),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                (
                    "checked_in_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "club",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="tickets", to="clubs.club"
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="tickets", to="events.event"
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="tickets", to="events.order"
                    ),
                ),
                (
                    "ticket_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tickets",
                        to="events.tickettype",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tickets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
    ]
