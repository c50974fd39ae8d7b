import smtplib
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

from app.core import mail
from app.core.config import settings
from app.core.security import create_state_token
from app.modules.auth.models import User, UserRole, UserStatus, VerificationToken
from app.modules.auth.oauth import OAuthError, get_google_provider
from app.main import app

from tests.conftest import PASSWORD

API = settings.API_V1_STR


def test_register_creates_subscriber(client):
    r = client.post(f"{API}/auth/register", json={"email": "New@Example.com", "password": "longenough"})
    assert r.status_code == 200
    body = r.json()
    assert body["email"] == "new@example.com"
    assert body["role"] == "SUBSCRIBER"
    assert body["kyc_status"] == "NONE"


def test_register_duplicate_email(client, make_user):
    make_user("taken@example.com")
    r = client.post(f"{API}/auth/register", json={"email": "taken@example.com", "password": "longenough"})
    assert r.status_code == 400
    assert "already exists" in r.json()["error"]


def test_register_cannot_self_assign_admin(client):
    r = client.post(
        f"{API}/auth/register",
        json={"email": "sneaky@example.com", "password": "longenough", "role": "ADMIN"},
    )
    assert r.status_code == 400
    assert "Role must be CREATOR or SUBSCRIBER" in r.json()["error"]


def test_register_short_password(client):
    r = client.post(f"{API}/auth/register", json={"email": "a@example.com", "password": "short"})
    assert r.status_code == 400


def test_login_sets_session_cookie(client, make_user):
    make_user("fan@example.com")
    r = client.post(f"{API}/auth/login", data={"username": "fan@example.com", "password": PASSWORD})
    assert r.status_code == 200
    assert r.json()["token_type"] == "bearer"
    assert settings.SESSION_COOKIE_NAME in r.cookies

    # The cookie alone authenticates follow-up requests
    r = client.get(f"{API}/users/profile")
    assert r.status_code == 200
    assert r.json()["email"] == "fan@example.com"


def test_login_wrong_password(client, make_user):
    make_user("fan@example.com")
    r = client.post(f"{API}/auth/login", data={"username": "fan@example.com", "password": "nope"})
    assert r.status_code == 400
    assert r.json() == {"error": "Incorrect email or password"}


def test_login_suspended_account(client, make_user):
    make_user("banned@example.com", status=UserStatus.SUSPENDED)
    r = client.post(f"{API}/auth/login", data={"username": "banned@example.com", "password": PASSWORD})
    assert r.status_code == 400


def test_logout_clears_cookie(client, make_user):
    make_user("fan@example.com")
    client.post(f"{API}/auth/login", data={"username": "fan@example.com", "password": PASSWORD})
    r = client.post(f"{API}/auth/logout")
    assert r.status_code == 200
    assert client.get(f"{API}/users/profile").status_code == 401


def test_bearer_header_wins_over_session_cookie(client, make_user, auth_headers):
    make_user("old@example.com")
    user = make_user("fan@example.com")
    client.post(f"{API}/auth/login", data={"username": "old@example.com", "password": PASSWORD})
    assert settings.SESSION_COOKIE_NAME in client.cookies

    r = client.get(f"{API}/users/profile", headers=auth_headers(user))
    assert r.status_code == 200
    assert r.json()["email"] == "fan@example.com"


def test_token_query_parameter(client, make_user, auth_headers):
    user = make_user("fan@example.com")
    token = auth_headers(user)["Authorization"].split(" ", 1)[1]
    r = client.get(f"{API}/users/profile", params={"token": token})
    assert r.status_code == 200


class FakeGoogle:
    def __init__(self, fail=False):
        self.fail = fail

    def get_authorization_url(self, state):
        return f"https://accounts.example/auth?state={state}"

    async def exchange_code_for_token(self, code):
        if self.fail:
            raise OAuthError("Failed to exchange authorization code")
        return "provider-token"

    async def get_user_info(self, token):
        return {
            "email": "oauth@example.com",
            "name": "OAuth User",
            "image": "https://img.example/a.png",
            "email_verified": True,
        }


def test_google_authorize_returns_url(client):
    app.dependency_overrides[get_google_provider] = lambda: FakeGoogle()
    r = client.get(f"{API}/auth/oauth/google/authorize")
    assert r.status_code == 200
    assert r.json()["url"].startswith("https://accounts.example/auth?state=")


def test_google_callback_creates_user(client, Session):
    app.dependency_overrides[get_google_provider] = lambda: FakeGoogle()
    state = create_state_token("anonymous", purpose="oauth.google")
    r = client.post(f"{API}/auth/oauth/google/callback", json={"code": "abc", "state": state})
    assert r.status_code == 200
    body = r.json()
    assert body["created"] is True
    assert body["user"]["email"] == "oauth@example.com"

    with Session() as s:
        user = s.query(User).filter_by(email="oauth@example.com").one()
        assert user.role == UserRole.SUBSCRIBER
        assert user.hashed_password is None
        assert user.email_verified_at is not None

    # Second sign-in finds the same account
    r = client.post(f"{API}/auth/oauth/google/callback", json={"code": "abc", "state": state})
    assert r.json()["created"] is False


def test_google_callback_rejects_bad_state(client):
    app.dependency_overrides[get_google_provider] = lambda: FakeGoogle()
    r = client.post(f"{API}/auth/oauth/google/callback", json={"code": "abc", "state": "forged"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid state parameter"}


def test_google_callback_provider_failure(client):
    app.dependency_overrides[get_google_provider] = lambda: FakeGoogle(fail=True)
    state = create_state_token("anonymous", purpose="oauth.google")
    r = client.post(f"{API}/auth/oauth/google/callback", json={"code": "abc", "state": state})
    assert r.status_code == 502


def _verification_link(client, email):
    r = client.post(f"{API}/auth/verify-email", json={"email": email})
    assert r.status_code == 200
    query = parse_qs(urlparse(r.json()["verification_url"]).query)
    return query["token"][0], query["email"][0]


def test_verify_email_link_flow(client, make_user, Session):
    user = make_user("fan@example.com")
    token, email = _verification_link(client, "Fan@Example.com")
    assert email == "fan@example.com"

    r = client.get(f"{API}/auth/verify-email", params={"token": token, "email": email})
    assert r.status_code == 200
    assert r.json() == {"message": "Email verified successfully", "verified": True, "success": True}
    with Session() as s:
        assert s.get(User, user.id).email_verified_at is not None
        assert s.query(VerificationToken).count() == 0

    # Single use
    r = client.get(f"{API}/auth/verify-email", params={"token": token, "email": email})
    assert r.json() == {"error": "Invalid or expired token"}

    r = client.post(f"{API}/auth/verify-email", json={"email": "fan@example.com"})
    assert r.json()["message"] == "Email already verified"
    assert r.json()["verified"] is True


def test_verify_email_rejects_bad_input(client, make_user):
    make_user("fan@example.com")
    assert client.post(f"{API}/auth/verify-email", json={"email": "nobody@example.com"}).status_code == 404

    r = client.get(f"{API}/auth/verify-email", params={"email": "fan@example.com"})
    assert r.json() == {"error": "Token and email required"}

    token, _ = _verification_link(client, "fan@example.com")
    r = client.get(f"{API}/auth/verify-email", params={"token": token, "email": "other@example.com"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid or expired token"}


def test_verify_email_expired_token(client, make_user, Session):
    user = make_user("fan@example.com")
    with Session() as s:
        s.add(VerificationToken(
            identifier="fan@example.com",
            token="stale",
            expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
        ))
        s.commit()

    r = client.get(f"{API}/auth/verify-email", params={"token": "stale", "email": "fan@example.com"})
    assert r.status_code == 400
    assert r.json() == {"error": "Token expired. Please request a new one."}
    with Session() as s:
        assert s.query(VerificationToken).count() == 0
        assert s.get(User, user.id).email_verified_at is None


def test_verify_email_sends_mail_when_configured(client, make_user, monkeypatch, Session):
    make_user("fan@example.com", name="Tom")
    sent = []
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(mail, "_send", sent.append)

    r = client.post(f"{API}/auth/verify-email", json={"email": "fan@example.com"})
    assert r.status_code == 200
    assert r.json() == {"message": "Verification email sent", "verified": False, "success": True}

    message = sent[0]
    assert message["To"] == "fan@example.com"
    assert message["Subject"] == "Verify your email address"
    with Session() as s:
        token = s.query(VerificationToken).one().token
    assert f"token={token}" in message.get_content()


def test_verify_email_smtp_failure(client, make_user, monkeypatch):
    make_user("fan@example.com")

    def refuse(message):
        raise smtplib.SMTPException("relay denied")

    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(mail, "_send", refuse)
    r = client.post(f"{API}/auth/verify-email", json={"email": "fan@example.com"})
    assert r.status_code == 502
    assert r.json() == {"error": "Failed to send e-mail"}


def test_verify_email_needs_smtp_in_production(client, make_user, monkeypatch, Session):
    make_user("fan@example.com")
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    r = client.post(f"{API}/auth/verify-email", json={"email": "fan@example.com"})
    assert r.status_code == 503
    assert r.json() == {"error": "E-mail delivery is not configured"}
    with Session() as s:
        assert s.query(VerificationToken).count() == 0
