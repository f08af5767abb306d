from django.contrib import admin

from events.models import RSVP, Event, Order, Ticket, TicketType


class TicketTypeInline(admin.TabularInline):  # type: ignore[type-arg]
    model = TicketType
    extra = 0
    fields = ["name", "price", "capacity", "sold"]
    readonly_fields = ["sold"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "club", "start", "status", "visibility", "payment_mode", "tickets_sold_count"]
    list_filter = ["status", "visibility", "payment_mode"]
    search_fields = ["name", "club__name"]
    readonly_fields = ["tickets_sold_count", "canceled_at"]
    filter_horizontal = ["allowed_universities"]
    inlines = [TicketTypeInline]


@admin.register(RSVP)
class RSVPAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "event", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["user__username", "event__name"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["id", "user", "event", "quantity", "total", "currency", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["user__username", "event__name", "payment_reference"]
    readonly_fields = ["reviewed_by", "reviewed_at", "paid_at", "rejected_reason"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["id", "user", "event", "ticket_type", "status", "checked_in_at"]
    list_filter = ["status"]
    search_fields = ["user__username", "event__name"]
    readonly_fields = ["checked_in_at", "checked_in_by"]
