from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.service.rate_limit_service import enforce_rate_limit
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import schema
from events.models import Order
from events.service import order_service


@api_controller("/orders", auth=I18nJWTAuth(), tags=["Orders"], throttle=UserDefaultThrottle())
class OrderController(UserAwareController):
    def get_order(self, order_id: UUID) -> Order:
        return get_object_or_404(Order, pk=order_id)

    @route.get("/", url_name="list_my_orders", response=list[schema.OrderSchema])
    def list_my_orders(self) -> QuerySet[Order]:
        return order_service.orders_for_user(self.user())

    @route.get("/{order_id}", url_name="get_order", response=schema.OrderSchema)
    def get_order_detail(self, order_id: UUID) -> Order:
        """Retrieve an order. Visible to its owner and to the club's officers."""
        return order_service.get_order_for(self.get_order(order_id), self.user())

    @route.post("/{order_id}/receipt", url_name="attach_receipt", response=schema.OrderSchema, throttle=WriteThrottle())
    def attach_receipt(self, order_id: UUID, payload: schema.ReceiptSchema) -> Order:
        """Attach the URL of a payment receipt. The order then awaits review by an officer."""
        enforce_rate_limit(self.rate_limit_key(), "attach_receipt")
        return order_service.attach_receipt(self.get_order(order_id), self.user(), payload.receipt_url)

    @route.post(
        "/{order_id}/review",
        url_name="review_order",
        response=schema.OrderReviewResultSchema,
        throttle=WriteThrottle(),
    )
    def review_order(self, order_id: UUID, payload: schema.OrderReviewSchema) -> order_service.ReviewResult:
        """Approve or reject an order awaiting review.

        Approval issues the tickets immediately. When the event has filled up in the
        meantime the order comes back ``rejected`` with no tickets.
        """
        return order_service.review_order(self.get_order(order_id), self.user(), payload.decision, payload.notes)
