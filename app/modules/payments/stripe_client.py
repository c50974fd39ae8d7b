"""
Minimal Stripe client over httpx.

Covers the Connect OAuth endpoints (payout account onboarding), the few REST
calls the platform makes (customers, products, subscriptions, saved payment
methods, manual-capture payment intents for bookings) and webhook signature
verification.
"""
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from app.core.config import settings
from app.core.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

CONNECT_AUTHORIZE_URL = "https://connect.stripe.com/oauth/authorize"
CONNECT_TOKEN_URL = "https://connect.stripe.com/oauth/token"
API_BASE = "https://api.stripe.com/v1"

WEBHOOK_TOLERANCE_SECONDS = 300

class StripeError(UpstreamServiceError):
    pass

class WebhookSignatureError(Exception):
    pass

def encode_params(data: Dict[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """
    Flattens nested dicts/lists into Stripe's bracket form encoding,
    e.g. {"items": [{"price": "p"}]} -> [("items[0][price]", "p")].
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            pairs.extend(encode_params(value, name))
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                item_name = f"{name}[{index}]"
                if isinstance(item, dict):
                    pairs.extend(encode_params(item, item_name))
                else:
                    pairs.append((item_name, str(item)))
        elif isinstance(value, bool):
            pairs.append((name, "true" if value else "false"))
        else:
            pairs.append((name, str(value)))
    return pairs

class StripeClient:

    def __init__(
        self,
        secret_key: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self.timeout = timeout
        self.transport = transport

    def _require_key(self) -> str:
        if not self.secret_key:
            raise StripeError("Stripe is not configured", status_code=503)
        return self.secret_key

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    @staticmethod
    def _parse(response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            logger.warning(f"Stripe returned a non-JSON body ({response.status_code})")
            raise StripeError(f"Stripe returned an invalid response ({response.status_code})")
        if not isinstance(body, dict):
            raise StripeError(f"Stripe returned an invalid response ({response.status_code})")
        return body

    async def _request(self, method: str, url: str, params: Optional[Dict[str, Any]] = None, auth: bool = True) -> Dict[str, Any]:
        headers = {}
        if auth:
            headers["Authorization"] = f"Bearer {self._require_key()}"
        data = dict(encode_params(params)) if params is not None else None
        try:
            async with self._client() as client:
                response = await client.request(method, url, data=data, headers=headers)
        except httpx.HTTPError as e:
            raise StripeError(f"Stripe unreachable: {e}")

        body = self._parse(response)
        if response.status_code >= 400:
            error = body.get("error")
            message = error.get("message") if isinstance(error, dict) else body.get("error_description") or error
            logger.warning(f"Stripe {method} {url} failed ({response.status_code}): {message}")
            raise StripeError(message or f"Stripe request failed with {response.status_code}")
        return body

    async def _post(self, url: str, params: Dict[str, Any], auth: bool = True) -> Dict[str, Any]:
        return await self._request("POST", url, params, auth=auth)

    async def _get(self, url: str) -> Dict[str, Any]:
        return await self._request("GET", url)

    async def _delete(self, url: str) -> Dict[str, Any]:
        return await self._request("DELETE", url)

    # Connect onboarding

    def build_connect_url(self, state: str, email: Optional[str]) -> str:
        params = [
            ("client_id", settings.STRIPE_CONNECT_CLIENT_ID or ""),
            ("response_type", "code"),
            ("scope", "read_write"),
            ("redirect_uri", f"{settings.FRONTEND_URL}/auth/stripe-connect"),
            ("state", state),
            ("stripe_user[email]", email or ""),
            ("stripe_user[business_type]", "individual"),
        ]
        return f"{CONNECT_AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_connect_code(self, code: str) -> str:
        """Returns the connected account id (acct_...)."""
        data = await self._post(
            CONNECT_TOKEN_URL,
            {"client_secret": self._require_key(), "code": code, "grant_type": "authorization_code"},
            auth=False,
        )
        account_id = data.get("stripe_user_id")
        if not account_id:
            raise StripeError("Failed to exchange authorization code")
        return account_id

    # Billing

    async def create_customer(self, email: str, name: Optional[str], user_id: str) -> str:
        data = await self._post(f"{API_BASE}/customers", {
            "email": email,
            "name": name,
            "metadata": {"userId": user_id},
        })
        return data["id"]

    async def create_subscription(
        self,
        customer_id: str,
        product_name: str,
        unit_amount: int,
        metadata: Dict[str, str],
        default_payment_method: Optional[str] = None,
    ) -> Dict[str, Any]:
        product = await self._post(f"{API_BASE}/products", {"name": product_name})
        return await self._post(f"{API_BASE}/subscriptions", {
            "customer": customer_id,
            "items": [{
                "price_data": {
                    "currency": "usd",
                    "product": product["id"],
                    "recurring": {"interval": "month"},
                    "unit_amount": unit_amount,
                },
            }],
            "metadata": metadata,
            "default_payment_method": default_payment_method,
        })

    async def cancel_subscription(self, subscription_id: str) -> Dict[str, Any]:
        return await self._delete(f"{API_BASE}/subscriptions/{subscription_id}")

    # Saved payment methods

    async def retrieve_setup_intent(self, setup_intent_id: str) -> Dict[str, Any]:
        return await self._get(f"{API_BASE}/setup_intents/{setup_intent_id}")

    async def attach_payment_method(self, payment_method_id: str, customer_id: str) -> Dict[str, Any]:
        return await self._post(f"{API_BASE}/payment_methods/{payment_method_id}/attach", {"customer": customer_id})

    async def set_default_payment_method(self, customer_id: str, payment_method_id: str) -> Dict[str, Any]:
        return await self._post(f"{API_BASE}/customers/{customer_id}", {
            "invoice_settings": {"default_payment_method": payment_method_id},
        })

    # Payment intents (booking holds)

    async def create_payment_intent(
        self,
        amount: int,
        customer_id: str,
        description: str,
        metadata: Dict[str, str],
        capture_method: str = "manual",
    ) -> Dict[str, Any]:
        """
        With capture_method=manual the card is only authorized; the funds are
        taken by capture_payment_intent or released by cancel_payment_intent.
        """
        return await self._post(f"{API_BASE}/payment_intents", {
            "amount": amount,
            "currency": "usd",
            "customer": customer_id,
            "capture_method": capture_method,
            "description": description,
            "metadata": metadata,
        })

    async def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        return await self._get(f"{API_BASE}/payment_intents/{payment_intent_id}")

    async def capture_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        return await self._post(f"{API_BASE}/payment_intents/{payment_intent_id}/capture", {})

    async def cancel_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        return await self._post(f"{API_BASE}/payment_intents/{payment_intent_id}/cancel", {})

    # Webhooks

    def construct_event(self, payload: bytes, sig_header: Optional[str], secret: Optional[str] = None) -> Dict[str, Any]:
        """
        Verifies a `Stripe-Signature: t=...,v1=...` header against the raw body
        and returns the parsed event.
        """
        secret = secret if secret is not None else settings.STRIPE_WEBHOOK_SECRET
        if not secret:
            raise WebhookSignatureError("Webhook secret not configured")
        if not sig_header:
            raise WebhookSignatureError("Missing Stripe-Signature header")

        timestamp = None
        signatures = []
        for part in sig_header.split(","):
            key, _, value = part.strip().partition("=")
            if key == "t":
                timestamp = value
            elif key == "v1":
                signatures.append(value)

        if not timestamp or not signatures:
            raise WebhookSignatureError("Malformed Stripe-Signature header")

        signed_payload = f"{timestamp}.".encode() + payload
        expected = hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()
        if not any(hmac.compare_digest(expected, sig) for sig in signatures):
            raise WebhookSignatureError("Invalid signature")

        try:
            if abs(time.time() - int(timestamp)) > WEBHOOK_TOLERANCE_SECONDS:
                raise WebhookSignatureError("Timestamp outside tolerance")
        except ValueError:
            raise WebhookSignatureError("Malformed timestamp")

        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            raise WebhookSignatureError("Invalid payload")

def get_stripe_client() -> StripeClient:
    return StripeClient()
