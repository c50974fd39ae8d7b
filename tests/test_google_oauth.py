import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from app.modules.auth.oauth import GoogleOAuthProvider, OAuthError


def _provider(handler):
    return GoogleOAuthProvider(transport=httpx.MockTransport(handler))


def test_exchange_code_for_token():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"access_token": "ya29.token", "token_type": "Bearer"})

    provider = _provider(handler)
    assert asyncio.run(provider.exchange_code_for_token("code-1")) == "ya29.token"

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == GoogleOAuthProvider.token_url
    form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
    assert form["code"] == "code-1"
    assert form["grant_type"] == "authorization_code"
    assert form["redirect_uri"] == provider.redirect_uri


def test_get_user_info_normalizes_profile():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={
            "email": "Ana@Example.com",
            "name": "Ana",
            "picture": "https://img.example/ana.png",
            "verified_email": True,
        })

    info = asyncio.run(_provider(handler).get_user_info("ya29.token"))

    assert seen[0].method == "GET"
    assert str(seen[0].url) == GoogleOAuthProvider.user_info_url
    assert seen[0].headers["Authorization"] == "Bearer ya29.token"
    assert info == {
        "email": "ana@example.com",
        "name": "Ana",
        "image": "https://img.example/ana.png",
        "email_verified": True,
    }


def test_token_endpoint_rejection():
    provider = _provider(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))
    with pytest.raises(OAuthError) as exc:
        asyncio.run(provider.exchange_code_for_token("bad"))
    assert exc.value.message == "Failed to exchange authorization code"


def test_token_endpoint_html_body():
    provider = _provider(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
    with pytest.raises(OAuthError) as exc:
        asyncio.run(provider.exchange_code_for_token("code-1"))
    assert exc.value.status_code == 502


def test_user_info_html_body():
    provider = _provider(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
    with pytest.raises(OAuthError):
        asyncio.run(provider.get_user_info("ya29.token"))


def test_user_info_without_email():
    provider = _provider(lambda request: httpx.Response(200, json={"name": "No Mail"}))
    with pytest.raises(OAuthError) as exc:
        asyncio.run(provider.get_user_info("ya29.token"))
    assert exc.value.message == "Identity provider returned no email"


def test_authorization_url_carries_state():
    url = GoogleOAuthProvider().get_authorization_url("signed-state")
    assert url.startswith(GoogleOAuthProvider.auth_url)
    assert "state=signed-state" in url
    assert "response_type=code" in url
