"""Admin interface for the accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.http import HttpRequest

from accounts.models import AuthorizationClaims, University, User, UserProfile


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ["username", "email", "preferred_name", "is_staff", "date_joined"]
    search_fields = ["username", "email", "first_name", "last_name", "preferred_name"]
    fieldsets = (*DjangoUserAdmin.fieldsets, ("Preferences", {"fields": ("preferred_name", "language")}))  # type: ignore[misc]


@admin.register(University)
class UniversityAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "slug"]
    search_fields = ["name"]
    prepopulated_fields = {"slug": ("name",)}


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "created_at"]
    filter_horizontal = ["universities"]
    autocomplete_fields = ["user"]


@admin.register(AuthorizationClaims)
class AuthorizationClaimsAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    """Claims are derived from memberships; edit memberships instead."""

    list_display = ["user", "updated_at"]
    readonly_fields = ["user", "claims", "created_at", "updated_at"]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False
