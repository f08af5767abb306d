import typing as t

from django.contrib import admin

from . import models


@admin.register(models.AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["created_at", "actor_id", "action", "target_collection", "target_id"]
    list_filter = ["action", "target_collection"]
    search_fields = ["actor_id", "target_id", "action"]
    readonly_fields = ["id", "actor_id", "action", "target_collection", "target_id", "meta", "created_at"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    def has_add_permission(self, request: t.Any) -> bool:
        return False

    def has_change_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False

    def has_delete_permission(self, request: t.Any, obj: t.Any = None) -> bool:
        return False


@admin.register(models.RateLimitCounter)
class RateLimitCounterAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["actor_key", "action", "count", "window_started_at", "blocked_until"]
    list_filter = ["action"]
    search_fields = ["actor_key"]
    readonly_fields = ["created_at", "updated_at", "last_request_at"]
