import typing as t
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, model_validator

from events.models import RSVP, Event, Order, Ticket, TicketType
from events.service.event_manager import EligibilityContext


class TicketTypeSchema(ModelSchema):
    remaining: int | None = None

    class Meta:
        model = TicketType
        fields = ("id", "name", "price", "capacity", "sold")


class TicketTypeCreateSchema(Schema):
    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    capacity: int | None = Field(default=None, ge=0)


class EventSchema(ModelSchema):
    ticket_types: list[TicketTypeSchema]
    allowed_university_ids: list[UUID]

    class Meta:
        model = Event
        fields = (
            "id",
            "club",
            "name",
            "description",
            "location",
            "visibility",
            "status",
            "start",
            "end",
            "rsvp_open",
            "rsvp_close",
            "capacity",
            "tickets_sold_count",
            "payment_mode",
            "price",
            "currency",
            "canceled_at",
        )

    @staticmethod
    def resolve_allowed_university_ids(obj: Event) -> list[UUID]:
        return [u.pk for u in obj.allowed_universities.all()]


class EventCreateSchema(Schema):
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    location: str = ""
    visibility: Event.Visibility = Event.Visibility.PUBLIC
    allowed_university_ids: list[UUID] = []
    start: AwareDatetime
    end: AwareDatetime
    rsvp_open: AwareDatetime | None = None
    rsvp_close: AwareDatetime | None = None
    capacity: int | None = Field(default=None, ge=0)
    payment_mode: Event.PaymentMode = Event.PaymentMode.FREE
    price: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = Field(default="", max_length=3)
    ticket_types: list[TicketTypeCreateSchema] = []

    @model_validator(mode="after")
    def check_schedule(self) -> t.Self:
        if self.end <= self.start:
            raise ValueError("End must be after start.")
        return self


class EventUpdateSchema(Schema):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    location: str | None = None
    visibility: Event.Visibility | None = None
    start: AwareDatetime | None = None
    end: AwareDatetime | None = None
    rsvp_open: AwareDatetime | None = None
    rsvp_close: AwareDatetime | None = None
    capacity: int | None = Field(default=None, ge=0)


class EventCancelSchema(Schema):
    reason: str = ""


class EligibilitySchema(Schema):
    allowed: bool
    event_id: UUID
    code: str | None = None
    message: str | None = None


class EligibilityQuerySchema(Schema):
    context: EligibilityContext = EligibilityContext.RSVP
    ticket_type_id: UUID | None = None


class RSVPSchema(ModelSchema):
    class Meta:
        model = RSVP
        fields = ("id", "event", "user", "status", "canceled_at", "created_at")


class OrderCreateSchema(Schema):
    ticket_type_id: UUID | None = None
    quantity: int = 1


class PaymentDetailsSchema(Schema):
    amount: Decimal
    currency: str
    event_name: str
    ticket_type: str | None = None
    quantity: int


class OrderCreatedSchema(Schema):
    order_id: UUID
    payment_details: PaymentDetailsSchema


class OrderSchema(ModelSchema):
    class Meta:
        model = Order
        fields = (
            "id",
            "event",
            "club",
            "user",
            "ticket_type",
            "quantity",
            "unit_price",
            "total",
            "currency",
            "status",
            "receipt_url",
            "notes",
            "rejected_reason",
            "reviewed_at",
            "paid_at",
            "created_at",
        )


class ReceiptSchema(Schema):
    receipt_url: str = Field(min_length=1, max_length=1024)


class OrderReviewSchema(Schema):
    decision: t.Literal["approved", "rejected"]
    notes: str = ""


class OrderReviewResultSchema(Schema):
    status: str
    ticket_ids: list[UUID]


class TicketSchema(ModelSchema):
    ticket_type_name: str | None = None

    class Meta:
        model = Ticket
        fields = ("id", "order", "event", "club", "user", "ticket_type", "status", "checked_in_at", "created_at")

    @staticmethod
    def resolve_ticket_type_name(obj: Ticket) -> str | None:
        return obj.ticket_type.name if obj.ticket_type else None


class TicketWithQRSchema(Schema):
    ticket: TicketSchema
    qr_data: str


class CheckInSchema(Schema):
    qr_data: str | None = None


class CheckInResultSchema(Schema):
    attendee_id: UUID
    ticket_type: str | None = None


class PaymentConfirmationSchema(Schema):
    order_id: UUID
    reference: str = ""
    amount: Decimal | None = None
    currency: str | None = None
