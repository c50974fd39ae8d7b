import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from app.core.config import settings
from app.main import app
from app.modules.payments.stripe_client import API_BASE, CONNECT_TOKEN_URL, StripeClient, StripeError, encode_params, get_stripe_client

API = settings.API_V1_STR


class Recorder:
    """Serves queued responses and keeps every request it saw."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return self.responses.pop(0)

    def form(self, index=-1):
        return {k: v[0] for k, v in parse_qs(self.requests[index].content.decode()).items()}


def _client(recorder, secret_key="sk_test_123"):
    return StripeClient(secret_key=secret_key, transport=httpx.MockTransport(recorder))


def test_encode_params_brackets():
    pairs = encode_params({
        "customer": "cus_1",
        "items": [{"price_data": {"unit_amount": 499, "recurring": {"interval": "month"}}}],
        "metadata": {"tier": "BASIC"},
        "name": None,
        "livemode": False,
    })
    assert pairs == [
        ("customer", "cus_1"),
        ("items[0][price_data][unit_amount]", "499"),
        ("items[0][price_data][recurring][interval]", "month"),
        ("metadata[tier]", "BASIC"),
        ("livemode", "false"),
    ]


def test_exchange_connect_code_posts_secret_and_grant():
    recorder = Recorder(httpx.Response(200, json={"stripe_user_id": "acct_9"}))
    account_id = asyncio.run(_client(recorder).exchange_connect_code("ac_1"))

    assert account_id == "acct_9"
    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == CONNECT_TOKEN_URL
    assert "Authorization" not in request.headers
    assert recorder.form() == {"client_secret": "sk_test_123", "code": "ac_1", "grant_type": "authorization_code"}


def test_exchange_connect_code_oauth_error():
    recorder = Recorder(httpx.Response(400, json={"error": "invalid_grant", "error_description": "Authorization code expired"}))
    with pytest.raises(StripeError) as exc:
        asyncio.run(_client(recorder).exchange_connect_code("old"))
    assert exc.value.message == "Authorization code expired"
    assert exc.value.status_code == 502


def test_create_subscription_form_fields():
    recorder = Recorder(
        httpx.Response(200, json={"id": "prod_1"}),
        httpx.Response(200, json={"id": "sub_1", "current_period_end": 1700000000}),
    )
    sub = asyncio.run(_client(recorder).create_subscription(
        customer_id="cus_1",
        product_name="Sarah - VIP Tier",
        unit_amount=2499,
        metadata={"tier": "VIP"},
    ))

    assert sub["id"] == "sub_1"
    product_request, sub_request = recorder.requests
    assert str(product_request.url) == f"{API_BASE}/products"
    assert recorder.form(0) == {"name": "Sarah - VIP Tier"}
    assert str(sub_request.url) == f"{API_BASE}/subscriptions"
    assert sub_request.headers["Authorization"] == "Bearer sk_test_123"
    form = recorder.form(1)
    assert form["customer"] == "cus_1"
    assert form["items[0][price_data][product]"] == "prod_1"
    assert form["items[0][price_data][unit_amount]"] == "2499"
    assert form["items[0][price_data][recurring][interval]"] == "month"
    assert form["metadata[tier]"] == "VIP"
    assert "default_payment_method" not in form


def test_cancel_subscription_uses_delete():
    recorder = Recorder(httpx.Response(200, json={"id": "sub_1", "status": "canceled"}))
    result = asyncio.run(_client(recorder).cancel_subscription("sub_1"))

    assert result["status"] == "canceled"
    assert recorder.requests[0].method == "DELETE"
    assert str(recorder.requests[0].url) == f"{API_BASE}/subscriptions/sub_1"


def test_manual_capture_payment_intent():
    recorder = Recorder(httpx.Response(200, json={"id": "pi_1", "client_secret": "pi_1_secret"}))
    intent = asyncio.run(_client(recorder).create_payment_intent(
        amount=20000, customer_id="cus_1", description="Booking request for Sarah", metadata={"bookingType": "date_booking"},
    ))
    assert intent["client_secret"] == "pi_1_secret"
    form = recorder.form()
    assert form["capture_method"] == "manual"
    assert form["amount"] == "20000"
    assert form["currency"] == "usd"
    assert form["metadata[bookingType]"] == "date_booking"


def test_api_error_message_is_surfaced():
    recorder = Recorder(httpx.Response(402, json={"error": {"message": "Your card was declined.", "type": "card_error"}}))
    with pytest.raises(StripeError) as exc:
        asyncio.run(_client(recorder).create_customer("fan@example.com", None, "u1"))
    assert exc.value.message == "Your card was declined."


def test_non_json_error_body_is_upstream_error():
    recorder = Recorder(httpx.Response(502, text="<html>Bad gateway</html>"))
    with pytest.raises(StripeError) as exc:
        asyncio.run(_client(recorder).create_customer("fan@example.com", None, "u1"))
    assert exc.value.status_code == 502


def test_non_json_delete_body_is_upstream_error():
    recorder = Recorder(httpx.Response(200, text="<html>ok</html>"))
    with pytest.raises(StripeError):
        asyncio.run(_client(recorder).cancel_subscription("sub_1"))


def test_network_failure_is_upstream_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = StripeClient(secret_key="sk_test_123", transport=httpx.MockTransport(refuse))
    with pytest.raises(StripeError) as exc:
        asyncio.run(client.create_customer("fan@example.com", None, "u1"))
    assert "Stripe unreachable" in exc.value.message


def test_missing_key_is_service_unavailable():
    recorder = Recorder()
    with pytest.raises(StripeError) as exc:
        asyncio.run(_client(recorder, secret_key="").create_customer("fan@example.com", None, "u1"))
    assert exc.value.status_code == 503
    assert recorder.requests == []


def test_html_gateway_page_maps_to_502(client, make_creator, make_user, auth_headers):
    recorder = Recorder(httpx.Response(502, text="<html>Bad gateway</html>"))
    app.dependency_overrides[get_stripe_client] = lambda: _client(recorder)
    creator = make_creator("c@example.com")
    fan = make_user("fan@example.com")
    r = client.post(
        f"{API}/stripe/create-subscription",
        headers=auth_headers(fan),
        json={"creator_id": str(creator.id), "tier": "BASIC"},
    )
    assert r.status_code == 502
    assert "error" in r.json()
