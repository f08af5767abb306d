from django.contrib import admin

from clubs.models import ApprovalRequest, Club, Membership


class MembershipInline(admin.TabularInline):  # type: ignore[type-arg]
    model = Membership
    extra = 0
    fields = ["user", "role", "status", "dues_status", "banned"]
    autocomplete_fields = ["user"]


@admin.register(Club)
class ClubAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "slug", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["name", "slug"]
    readonly_fields = ["last_edited_by", "archived_at"]
    filter_horizontal = ["universities"]
    inlines = [MembershipInline]


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "club", "role", "status", "dues_status", "banned"]
    list_filter = ["status", "role", "dues_status", "banned"]
    search_fields = ["user__username", "user__email", "club__name"]
    autocomplete_fields = ["user", "club"]


@admin.register(ApprovalRequest)
class ApprovalRequestAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["request_type", "resource_id", "status", "created_at", "reviewed_at"]
    list_filter = ["request_type", "status"]
