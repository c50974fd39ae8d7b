"""
Google sign-in (OAuth 2.0 authorization code flow).

The browser is sent to the consent screen with a signed `state`; the front end
posts the returned `code` back and we exchange it for the user's profile.
"""
import logging
from typing import Dict, Optional
from urllib.parse import urlencode

import httpx

from app.core.config import settings
from app.core.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

class OAuthError(UpstreamServiceError):
    pass

def _json_body(response: httpx.Response) -> Dict:
    try:
        data = response.json()
    except ValueError:
        logger.warning(f"Google returned a non-JSON body ({response.status_code})")
        raise OAuthError("Identity provider returned an invalid response")
    if not isinstance(data, dict):
        raise OAuthError("Identity provider returned an invalid response")
    return data

class GoogleOAuthProvider:
    auth_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    user_info_url = "https://www.googleapis.com/oauth2/v2/userinfo"
    scopes = ["openid", "email", "profile"]

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client_id = settings.GOOGLE_CLIENT_ID or ""
        self.client_secret = settings.GOOGLE_CLIENT_SECRET or ""
        self.redirect_uri = f"{settings.FRONTEND_URL}/auth/callback/google"
        self.timeout = timeout
        self.transport = transport

    def get_authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.scopes),
            "response_type": "code",
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}"

    async def exchange_code_for_token(self, code: str) -> str:
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.token_url, data=data)
        except httpx.HTTPError as e:
            raise OAuthError(f"Identity provider unreachable: {e}")

        if response.status_code != 200:
            logger.warning(f"Google token exchange failed: {response.status_code} {response.text}")
            raise OAuthError("Failed to exchange authorization code")

        access_token = _json_body(response).get("access_token")
        if not access_token:
            raise OAuthError("Identity provider returned no access token")
        return access_token

    async def get_user_info(self, access_token: str) -> Dict:
        """
        Normalized profile: {email, name, image, email_verified}.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    self.user_info_url,
                    headers={"Authorization": f"Bearer {access_token}"}
                )
        except httpx.HTTPError as e:
            raise OAuthError(f"Identity provider unreachable: {e}")

        if response.status_code != 200:
            raise OAuthError("Failed to fetch user profile")

        data = _json_body(response)
        if not data.get("email"):
            raise OAuthError("Identity provider returned no email")
        return {
            "email": data["email"].lower(),
            "name": data.get("name"),
            "image": data.get("picture"),
            "email_verified": bool(data.get("verified_email")),
        }

def get_google_provider() -> GoogleOAuthProvider:
    return GoogleOAuthProvider()
