from django.http import HttpRequest
from django.utils.translation import gettext as _
from ninja_extra import api_controller, route

from common import signing
from common.enums import ErrorCode
from common.exceptions import PermissionDeniedError
from common.throttling import WebhookThrottle
from events import schema
from events.models import Order
from events.service import order_service

SIGNATURE_HEADER = "HTTP_X_CLUBHUB_SIGNATURE"


@api_controller("/payments", auth=None, tags=["Payments"], throttle=WebhookThrottle())
class PaymentWebhookController:
    @route.post("/confirmations", url_name="confirm_payment", response=schema.OrderSchema)
    def confirm_payment(self, request: HttpRequest, payload: schema.PaymentConfirmationSchema) -> Order:
        """Receive a payment confirmation from the payment provider.

        The raw body must be signed with HMAC-SHA256 under the shared webhook secret,
        hex encoded in the ``X-ClubHub-Signature`` header. Repeated deliveries are harmless.
        """
        if not signing.verify_body(request.body, request.META.get(SIGNATURE_HEADER), signing.PAYMENT_WEBHOOK_DOMAIN):
            raise PermissionDeniedError(_("Invalid webhook signature."), code=ErrorCode.UNAUTHORIZED)
        return order_service.confirm_payment(
            payload.order_id,
            payload.reference,
            {"amount": str(payload.amount) if payload.amount is not None else None, "currency": payload.currency},
        )
