"""Integration tests for the event, order, ticket and payment endpoints."""

import typing as t
from datetime import timedelta

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client
from django.utils import timezone

from accounts.models import User
from clubs.models import Club
from common import signing
from events.models import RSVP, Event, Order, Ticket, TicketType
from events.service.ticket_issuance import issue_tickets_for_order

pytestmark = pytest.mark.django_db

JSON = "application/json"


def post(client: Client, url: str, payload: dict[str, t.Any] | None = None) -> t.Any:
    return client.post(url, data=orjson.dumps(payload or {}), content_type=JSON)


class TestEventEndpoints:
    def test_create_event(self, officer_client: Client, club: Club) -> None:
        start = timezone.now() + timedelta(days=2)
        response = post(
            officer_client,
            reverse("api:create_event", kwargs={"club_id": club.pk}),
            {
                "name": "Simul",
                "start": start.isoformat(),
                "end": (start + timedelta(hours=2)).isoformat(),
                "payment_mode": "managed",
                "ticket_types": [{"name": "general", "price": "3.50", "capacity": 10}],
            },
        )
        assert response.status_code == 201, response.content
        data = response.json()
        assert data["name"] == "Simul"
        assert data["ticket_types"][0]["remaining"] == 10

    def test_create_event_forbidden_for_members(self, user_client: Client, club: Club) -> None:
        start = timezone.now() + timedelta(days=2)
        response = post(
            user_client,
            reverse("api:create_event", kwargs={"club_id": club.pk}),
            {"name": "Simul", "start": start.isoformat(), "end": (start + timedelta(hours=1)).isoformat()},
        )
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_list_club_events(self, user_client: Client, club: Club, free_event: Event) -> None:
        response = user_client.get(reverse("api:list_club_events", kwargs={"club_id": club.pk}))
        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [str(free_event.pk)]

    def test_unknown_event(self, user_client: Client) -> None:
        response = user_client.get(
            reverse("api:get_event", kwargs={"event_id": "00000000-0000-0000-0000-000000000000"})
        )
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_requires_authentication(self, client: Client, free_event: Event) -> None:
        response = client.get(reverse("api:get_event", kwargs={"event_id": free_event.pk}))
        assert response.status_code == 401

    def test_cancel_twice(self, officer_client: Client, free_event: Event) -> None:
        url = reverse("api:cancel_event", kwargs={"event_id": free_event.pk})
        assert post(officer_client, url).json()["status"] == "canceled"
        response = post(officer_client, url)
        assert response.status_code == 409

    def test_update_event(self, officer_client: Client, free_event: Event) -> None:
        response = officer_client.patch(
            reverse("api:update_event", kwargs={"event_id": free_event.pk}),
            data=orjson.dumps({"location": "Room 101"}),
            content_type=JSON,
        )
        assert response.status_code == 200
        assert response.json()["location"] == "Room 101"


class TestAdmissionEndpoints:
    def test_eligibility_dry_run(self, user_client: Client, free_event: Event) -> None:
        response = user_client.get(reverse("api:check_eligibility", kwargs={"event_id": free_event.pk}))
        assert response.status_code == 200
        assert response.json() == {
            "allowed": True,
            "event_id": str(free_event.pk),
            "code": None,
            "message": None,
        }

    def test_eligibility_for_sold_out_type(
        self, user_client: Client, paid_event: Event, ticket_type: TicketType
    ) -> None:
        ticket_type.sold = 2
        ticket_type.save()
        response = user_client.get(
            reverse("api:check_eligibility", kwargs={"event_id": paid_event.pk}),
            {"context": "order", "ticket_type_id": str(ticket_type.pk)},
        )
        assert response.json()["allowed"] is False
        assert response.json()["code"] == "sold_out"

    def test_rsvp_then_duplicate(self, user_client: Client, user: User, free_event: Event) -> None:
        url = reverse("api:rsvp", kwargs={"event_id": free_event.pk})
        response = post(user_client, url)
        assert response.status_code == 201
        assert response.json()["status"] == "confirmed"

        response = post(user_client, url)
        assert response.status_code == 400
        assert response.json()["code"] == "already_joined"
        assert response.json()["allowed"] is False

    def test_rsvp_to_paid_event_needs_an_order(self, user_client: Client, paid_event: Event) -> None:
        response = post(user_client, reverse("api:rsvp", kwargs={"event_id": paid_event.pk}))
        assert response.status_code == 400
        assert response.json() == {"code": "failed_precondition", "detail": "Paid events require an order"}
        assert not paid_event.rsvps.exists()

    def test_cancel_rsvp(self, user_client: Client, user: User, free_event: Event) -> None:
        RSVP.objects.create(event=free_event, user=user)
        response = user_client.delete(reverse("api:cancel_rsvp", kwargs={"event_id": free_event.pk}))
        assert response.status_code == 200
        assert response.json()["status"] == "canceled"

    def test_order_receipt_review_flow(
        self,
        user_client: Client,
        officer_client: Client,
        paid_event: Event,
        ticket_type: TicketType,
    ) -> None:
        response = post(
            user_client,
            reverse("api:create_order", kwargs={"event_id": paid_event.pk}),
            {"ticket_type_id": str(ticket_type.pk), "quantity": 2},
        )
        assert response.status_code == 201
        created = response.json()
        assert created["payment_details"]["amount"] == "40.00"
        order_id = created["order_id"]

        response = post(
            user_client,
            reverse("api:attach_receipt", kwargs={"order_id": order_id}),
            {"receipt_url": "https://receipts.example.com/42.pdf"},
        )
        assert response.json()["status"] == "awaiting_review"

        response = post(
            user_client, reverse("api:review_order", kwargs={"order_id": order_id}), {"decision": "approved"}
        )
        assert response.status_code == 403

        response = post(
            officer_client, reverse("api:review_order", kwargs={"order_id": order_id}), {"decision": "approved"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert len(response.json()["ticket_ids"]) == 2

        response = user_client.get(reverse("api:list_my_tickets"))
        assert len(response.json()) == 2

    def test_other_users_cannot_see_order(
        self, other_client: Client, user: User, order_factory: t.Callable[..., Order]
    ) -> None:
        order = order_factory(user)
        response = other_client.get(reverse("api:get_order", kwargs={"order_id": order.pk}))
        assert response.status_code == 403


class TestTicketEndpoints:
    @pytest.fixture
    def ticket(self, user: User, order_factory: t.Callable[..., Order]) -> Ticket:
        order = order_factory(user, status=Order.Status.APPROVED)
        return Ticket.objects.get(pk=issue_tickets_for_order(order.pk).ticket_ids[0])

    def test_get_ticket_with_qr(self, user_client: Client, ticket: Ticket) -> None:
        response = user_client.get(reverse("api:get_ticket", kwargs={"ticket_id": ticket.pk}))
        assert response.status_code == 200
        data = response.json()
        assert data["ticket"]["id"] == str(ticket.pk)
        assert data["ticket"]["ticket_type_name"] == "general"
        assert orjson.loads(data["qr_data"])["ticket_id"] == str(ticket.pk)

    def test_check_in_twice(self, user_client: Client, officer_client: Client, ticket: Ticket) -> None:
        qr_data = user_client.get(reverse("api:get_ticket", kwargs={"ticket_id": ticket.pk})).json()["qr_data"]
        url = reverse("api:check_in_ticket", kwargs={"ticket_id": ticket.pk})

        response = post(officer_client, url, {"qr_data": qr_data})
        assert response.status_code == 200
        assert response.json() == {"attendee_id": str(ticket.user_id), "ticket_type": "general"}

        response = post(officer_client, url, {"qr_data": qr_data})
        assert response.status_code == 400
        assert response.json()["code"] == "failed_precondition"
        assert response.json()["detail"] == "This ticket has already been checked in."

    def test_check_in_with_foreign_qr(
        self, user_client: Client, officer_client: Client, ticket: Ticket, free_event: Event
    ) -> None:
        response = user_client.get(reverse("api:get_ticket", kwargs={"ticket_id": ticket.pk}))
        qr = orjson.loads(response.json()["qr_data"])
        qr["ticket_id"] = str(free_event.pk)
        url = reverse("api:check_in_ticket", kwargs={"ticket_id": ticket.pk})

        response = post(officer_client, url, {"qr_data": orjson.dumps(qr).decode()})

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_request"
        ticket.refresh_from_db()
        assert ticket.status == Ticket.Status.VALID


class TestPaymentWebhook:
    @pytest.fixture(autouse=True)
    def webhook_secret(self, settings: t.Any) -> None:
        settings.PAYMENT_WEBHOOK_SECRET = "whsec_test"

    def send(self, client: Client, body: bytes, signature: str | None) -> t.Any:
        extra = {"HTTP_X_CLUBHUB_SIGNATURE": signature} if signature else {}
        return client.post(reverse("api:confirm_payment"), data=body, content_type=JSON, **extra)

    def test_signed_confirmation_issues_tickets(
        self,
        client: Client,
        user: User,
        order_factory: t.Callable[..., Order],
        django_capture_on_commit_callbacks: t.Any,
    ) -> None:
        order = order_factory(user)
        body = orjson.dumps({"order_id": str(order.pk), "reference": "pay_1"})
        signature = signing.sign_body(body, signing.PAYMENT_WEBHOOK_DOMAIN)

        with django_capture_on_commit_callbacks(execute=True):
            response = self.send(client, body, signature)

        assert response.status_code == 200
        assert response.json()["status"] == "paid"
        assert order.tickets.count() == 1

    @pytest.mark.parametrize("signature", [None, "0" * 64])
    def test_bad_signature(
        self, client: Client, user: User, order_factory: t.Callable[..., Order], signature: str | None
    ) -> None:
        order = order_factory(user)
        response = self.send(client, orjson.dumps({"order_id": str(order.pk)}), signature)
        assert response.status_code == 403
        assert response.json()["code"] == "unauthorized"
        order.refresh_from_db()
        assert order.status == Order.Status.PENDING

    def test_unset_secret_rejects_everything(
        self, client: Client, settings: t.Any, user: User, order_factory: t.Callable[..., Order]
    ) -> None:
        order = order_factory(user)
        body = orjson.dumps({"order_id": str(order.pk)})
        signature = signing.sign_body(body, signing.PAYMENT_WEBHOOK_DOMAIN)
        settings.PAYMENT_WEBHOOK_SECRET = ""
        assert self.send(client, body, signature).status_code == 403
