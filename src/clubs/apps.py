from django.apps import AppConfig


class ClubsConfig(AppConfig):
    """Configuration for the clubs app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "clubs"

    def ready(self) -> None:
        """Connect the membership and approval signal handlers."""
        import clubs.signals  # noqa: F401
