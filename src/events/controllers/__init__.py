from .events import ClubEventController, EventController
from .orders import OrderController
from .payments import PaymentWebhookController
from .tickets import TicketController

__all__ = [
    "ClubEventController",
    "EventController",
    "OrderController",
    "PaymentWebhookController",
    "TicketController",
]
