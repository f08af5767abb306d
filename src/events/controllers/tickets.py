import typing as t
from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.service.rate_limit_service import enforce_rate_limit
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import schema
from events.models import Ticket
from events.service import ticket_service


@api_controller("/tickets", auth=I18nJWTAuth(), tags=["Tickets"], throttle=UserDefaultThrottle())
class TicketController(UserAwareController):
    def get_ticket(self, ticket_id: UUID) -> Ticket:
        return get_object_or_404(Ticket.objects.select_related("ticket_type"), pk=ticket_id)

    @route.get("/", url_name="list_my_tickets", response=list[schema.TicketSchema])
    def list_my_tickets(self) -> QuerySet[Ticket]:
        return Ticket.objects.filter(user=self.user()).select_related("ticket_type")

    @route.get("/{ticket_id}", url_name="get_ticket", response=schema.TicketWithQRSchema)
    def get_ticket_detail(self, ticket_id: UUID) -> dict[str, t.Any]:
        """Retrieve a ticket together with the signed payload for its QR code."""
        ticket, qr_data = ticket_service.get_ticket(self.get_ticket(ticket_id), self.user())
        return {"ticket": ticket, "qr_data": qr_data}

    @route.post(
        "/{ticket_id}/check-in",
        url_name="check_in_ticket",
        response=schema.CheckInResultSchema,
        throttle=WriteThrottle(),
    )
    def check_in(self, ticket_id: UUID, payload: schema.CheckInSchema) -> ticket_service.CheckInResult:
        """Check an attendee in. Club officers and admins only.

        When the scanned ``qr_data`` is sent along, its signature must match the ticket.
        """
        enforce_rate_limit(self.rate_limit_key(), "check_in")
        return ticket_service.check_in_ticket(self.get_ticket(ticket_id), self.user(), payload.qr_data)
