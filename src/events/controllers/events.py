from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja import Query
from ninja_extra import api_controller, route

from clubs.models import Club
from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import schema
from events.models import RSVP, Event
from events.service import event_service
from events.service.event_manager import EventManager, EventUserEligibility, OrderCreated


def _events() -> QuerySet[Event]:
    return Event.objects.select_related("club").prefetch_related("ticket_types", "allowed_universities")


@api_controller("/clubs", auth=I18nJWTAuth(), tags=["Events"], throttle=UserDefaultThrottle())
class ClubEventController(UserAwareController):
    @route.get("/{club_id}/events", url_name="list_club_events", response=list[schema.EventSchema])
    def list_club_events(self, club_id: UUID) -> QuerySet[Event]:
        """List the upcoming events of a club."""
        return _events().upcoming().filter(club_id=club_id)

    @route.post(
        "/{club_id}/events", url_name="create_event", response={201: schema.EventSchema}, throttle=WriteThrottle()
    )
    def create_event(self, club_id: UUID, payload: schema.EventCreateSchema) -> tuple[int, Event]:
        """Create an event with optional ticket types. Club officers and admins only."""
        club = get_object_or_404(Club, pk=club_id)
        event = event_service.create_event(club, self.user(), payload)
        return 201, _events().get(pk=event.pk)


@api_controller("/events", auth=I18nJWTAuth(), tags=["Events"], throttle=UserDefaultThrottle())
class EventController(UserAwareController):
    def get_event(self, event_id: UUID) -> Event:
        return get_object_or_404(_events(), pk=event_id)

    @route.get("/{event_id}", url_name="get_event", response=schema.EventSchema)
    def get_event_detail(self, event_id: UUID) -> Event:
        return self.get_event(event_id)

    @route.patch("/{event_id}", url_name="update_event", response=schema.EventSchema, throttle=WriteThrottle())
    def update_event(self, event_id: UUID, payload: schema.EventUpdateSchema) -> Event:
        """Edit an active event. Only the fields present in the body change."""
        event = event_service.update_event(self.get_event(event_id), self.user(), payload)
        return self.get_event(event.pk)

    @route.post("/{event_id}/cancel", url_name="cancel_event", response=schema.EventSchema, throttle=WriteThrottle())
    def cancel_event(self, event_id: UUID, payload: schema.EventCancelSchema) -> Event:
        event = event_service.cancel_event(self.get_event(event_id), self.user(), payload.reason)
        return self.get_event(event.pk)

    @route.get("/{event_id}/eligibility", url_name="check_eligibility", response=schema.EligibilitySchema)
    def check_eligibility(self, event_id: UUID, params: Query[schema.EligibilityQuerySchema]) -> EventUserEligibility:
        """Dry-run the eligibility guard for the caller.

        Always answers 200. Inspect ``allowed`` and ``code`` to find out whether an
        RSVP or an order would currently be accepted.
        """
        return EventManager(self.user(), event_id).check_eligibility(params.context, params.ticket_type_id)

    @route.post("/{event_id}/rsvp", url_name="rsvp", response={201: schema.RSVPSchema}, throttle=WriteThrottle())
    def rsvp(self, event_id: UUID) -> tuple[int, RSVP]:
        """RSVP to a free event.

        A denial by the eligibility guard answers 400 with the eligibility result.
        """
        manager = EventManager(self.user(), self.get_event(event_id).pk, rate_limit_key=self.rate_limit_key())
        return 201, manager.rsvp()

    @route.delete("/{event_id}/rsvp", url_name="cancel_rsvp", response=schema.RSVPSchema, throttle=WriteThrottle())
    def cancel_rsvp(self, event_id: UUID) -> RSVP:
        return EventManager(self.user(), event_id).cancel_rsvp()

    @route.post(
        "/{event_id}/orders",
        url_name="create_order",
        response={201: schema.OrderCreatedSchema},
        throttle=WriteThrottle(),
    )
    def create_order(self, event_id: UUID, payload: schema.OrderCreateSchema) -> tuple[int, OrderCreated]:
        """Start an order for a paid event and get the payment details back.

        Tickets are issued once the payment is confirmed or the receipt approved.
        """
        manager = EventManager(self.user(), self.get_event(event_id).pk, rate_limit_key=self.rate_limit_key())
        return 201, manager.create_order(payload.ticket_type_id, payload.quantity)
