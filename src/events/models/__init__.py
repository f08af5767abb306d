from .event import Event, TicketType
from .order import Order
from .rsvp import RSVP
from .ticket import Ticket

__all__ = [
    "Event",
    "Order",
    "RSVP",
    "Ticket",
    "TicketType",
]
