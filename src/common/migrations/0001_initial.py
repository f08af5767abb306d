import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies: list[tuple[str, str]] = []

    operations = [
        migrations.CreateModel(
            name="AuditLogEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("actor_id", models.CharField(db_index=True, max_length=128)),
                ("action", models.CharField(db_index=True, max_length=128)),
                ("target_collection", models.CharField(max_length=64)),
                ("target_id", models.CharField(max_length=128)),
                ("meta", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                "verbose_name_plural": "audit log entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["target_collection", "target_id"], name="audit_target_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RateLimitCounter",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("actor_key", models.CharField(max_length=128)),
                ("action", models.CharField(max_length=64)),
                ("count", models.PositiveIntegerField(default=0)),
                ("window_started_at", models.DateTimeField()),
                ("last_request_at", models.DateTimeField()),
                ("blocked_until", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "indexes": [models.Index(fields=["last_request_at"], name="rate_limit_last_request_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("actor_key", "action"), name="unique_rate_limit_counter"),
                ],
            },
        ),
    ]
