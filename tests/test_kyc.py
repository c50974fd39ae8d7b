from datetime import date

from app.core.config import settings
from app.modules.auth.models import KYCStatus, User, UserRole
from app.modules.kyc.models import GovernmentIdType, KYCSubmission, SubmissionStatus
from app.modules.notifications.models import Notification

API = settings.API_V1_STR

SUBMISSION = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "date_of_birth": "1990-05-01",
    "id_type": "PASSPORT",
    "government_id_number": "P1234567",
}


def _payload(user, **fields):
    payload = dict(
        SUBMISSION,
        government_id_key=f"kyc/{user.id}/id/1.jpg",
        liveliness_key=f"kyc/{user.id}/selfie/1.jpg",
    )
    payload.update(fields)
    return payload


def _submission(user, status=SubmissionStatus.PENDING, **fields):
    return KYCSubmission(
        user_id=user.id,
        first_name="Ada",
        last_name="Lovelace",
        date_of_birth=date(1990, 5, 1),
        government_id_type=GovernmentIdType.PASSPORT,
        government_id_number="P1234567",
        government_id_image_url="kyc/u/id/1.jpg",
        liveliness_image_url="kyc/u/selfie/1.jpg",
        status=status,
        **fields,
    )


def test_upload_url_requires_auth(client):
    r = client.post(f"{API}/kyc/upload-url", json={"file_type": "image/png", "doc_type": "id"})
    assert r.status_code == 401


def test_upload_url(client, make_user, auth_headers):
    user = make_user("creator@example.com", role=UserRole.CREATOR)
    r = client.post(f"{API}/kyc/upload-url", headers=auth_headers(user), json={"file_type": "image/png", "doc_type": "selfie"})
    assert r.status_code == 200
    body = r.json()
    assert body["file_key"].startswith(f"kyc/{user.id}/selfie/")
    assert body["file_key"].endswith(".png")
    assert body["upload_url"].endswith(f"{API}/uploads/mock")
    assert body["auth_token"] == "mock-token"
    assert body["expires_in"] == 86400


def test_upload_url_validation(client, make_user, auth_headers):
    headers = auth_headers(make_user("creator@example.com"))
    r = client.post(f"{API}/kyc/upload-url", headers=headers, json={"file_type": "image/gif", "doc_type": "id"})
    assert r.status_code == 400
    r = client.post(f"{API}/kyc/upload-url", headers=headers, json={"file_type": "image/png", "doc_type": "passport"})
    assert r.status_code == 400
    r = client.post(f"{API}/kyc/upload-url", headers=headers, json={"doc_type": "id"})
    assert r.status_code == 400


def test_submit_creates_pending_submission(client, make_user, auth_headers, Session):
    user = make_user("creator@example.com", role=UserRole.CREATOR)
    r = client.post(f"{API}/kyc/submit", headers=auth_headers(user), json=_payload(user))
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "PENDING"

    with Session() as s:
        submission = s.query(KYCSubmission).one()
        assert str(submission.id) == body["kyc_id"]
        assert submission.government_id_image_url == f"kyc/{user.id}/id/1.jpg"
        assert s.get(User, user.id).kyc_status == KYCStatus.PENDING
        assert s.query(Notification).filter_by(user_id=user.id).count() == 1


def test_submit_missing_fields(client, make_user, auth_headers):
    user = make_user("creator@example.com")
    payload = _payload(user)
    del payload["liveliness_key"]
    r = client.post(f"{API}/kyc/submit", headers=auth_headers(user), json=payload)
    assert r.status_code == 400


def test_submit_blocked_while_pending_or_verified(client, make_user, auth_headers, Session):
    pending = make_user("pending@example.com")
    verified = make_user("verified@example.com")
    with Session() as s:
        s.add_all([_submission(pending), _submission(verified, status=SubmissionStatus.VERIFIED)])
        s.commit()

    assert client.post(f"{API}/kyc/submit", headers=auth_headers(pending), json=_payload(pending)).status_code == 400
    assert client.post(f"{API}/kyc/submit", headers=auth_headers(verified), json=_payload(verified)).status_code == 400


def test_resubmit_after_rejection_updates_in_place(client, make_user, auth_headers, Session):
    user = make_user("creator@example.com", kyc_status=KYCStatus.REJECTED)
    with Session() as s:
        s.add(_submission(user, status=SubmissionStatus.REJECTED, rejection_reason="Blurry"))
        s.commit()

    payload = _payload(user, government_id_key=f"kyc/{user.id}/id/2.jpg")
    r = client.post(f"{API}/kyc/submit", headers=auth_headers(user), json=payload)
    assert r.status_code == 200

    with Session() as s:
        submission = s.query(KYCSubmission).one()
        assert submission.status == SubmissionStatus.PENDING
        assert submission.rejection_reason is None
        assert submission.government_id_image_url == f"kyc/{user.id}/id/2.jpg"


def test_submit_rejects_other_users_document_keys(client, make_user, auth_headers, Session):
    user = make_user("creator@example.com")
    victim = make_user("victim@example.com")
    headers = auth_headers(user)

    for field, key in (
        ("government_id_key", f"kyc/{victim.id}/id/1.jpg"),
        ("liveliness_key", f"kyc/{victim.id}/selfie/1.jpg"),
        ("government_id_back_key", f"kyc/{victim.id}/id/2.jpg"),
        ("government_id_key", f"profiles/{user.id}/1.jpg"),
    ):
        r = client.post(f"{API}/kyc/submit", headers=headers, json=_payload(user, **{field: key}))
        assert r.status_code == 400
        assert r.json() == {"error": "Document keys must be uploads of the current user"}

    with Session() as s:
        assert s.query(KYCSubmission).count() == 0
        assert s.get(User, user.id).kyc_status == KYCStatus.NONE


def test_status(client, make_user, auth_headers):
    user = make_user("creator@example.com")
    body = client.get(f"{API}/kyc/status", headers=auth_headers(user)).json()
    assert body == {"kyc_status": "NONE", "submission": None}


def test_admin_endpoints_require_admin(client, make_user, auth_headers):
    assert client.get(f"{API}/admin/kyc/pending").status_code == 401
    user = make_user("creator@example.com", role=UserRole.CREATOR)
    r = client.get(f"{API}/admin/kyc/pending", headers=auth_headers(user))
    assert r.status_code == 403
    assert r.json() == {"error": "Forbidden - Admin access required"}


def test_admin_lists_pending_with_download_urls(client, make_user, auth_headers, Session):
    admin = make_user("admin@example.com", role=UserRole.ADMIN)
    user = make_user("creator@example.com", name="Ada")
    done = make_user("done@example.com")
    with Session() as s:
        s.add_all([_submission(user), _submission(done, status=SubmissionStatus.VERIFIED)])
        s.commit()

    r = client.get(f"{API}/admin/kyc/pending", headers=auth_headers(admin))
    assert r.status_code == 200
    items = r.json()
    assert len(items) == 1
    assert items[0]["user_email"] == "creator@example.com"
    assert items[0]["government_id_url"].endswith("/static/uploads/kyc/u/id/1.jpg")
    assert items[0]["government_id_back_url"] is None


def test_admin_approve(client, make_user, auth_headers, Session):
    admin = make_user("admin@example.com", role=UserRole.ADMIN)
    user = make_user("creator@example.com", role=UserRole.CREATOR, kyc_status=KYCStatus.PENDING)
    submission = _submission(user)
    with Session() as s:
        s.add(submission)
        s.commit()

    r = client.post(f"{API}/admin/kyc/approve", headers=auth_headers(admin), json={"submission_id": str(submission.id)})
    assert r.status_code == 200
    assert r.json()["submission"]["status"] == "VERIFIED"

    with Session() as s:
        db_user = s.get(User, user.id)
        assert db_user.kyc_status == KYCStatus.VERIFIED
        assert db_user.kyc_verified_at is not None
        assert s.get(KYCSubmission, submission.id).reviewed_by == admin.id
        assert s.query(Notification).filter_by(user_id=user.id, title="KYC Approved").count() == 1

    # Already reviewed
    r = client.post(f"{API}/admin/kyc/approve", headers=auth_headers(admin), json={"submission_id": str(submission.id)})
    assert r.status_code == 400


def test_admin_approve_unknown(client, make_user, auth_headers):
    admin = make_user("admin@example.com", role=UserRole.ADMIN)
    r = client.post(
        f"{API}/admin/kyc/approve",
        headers=auth_headers(admin),
        json={"submission_id": "00000000-0000-0000-0000-000000000002"},
    )
    assert r.status_code == 404


def test_admin_reject(client, make_user, auth_headers, Session):
    admin = make_user("admin@example.com", role=UserRole.ADMIN)
    user = make_user("creator@example.com", role=UserRole.CREATOR, kyc_status=KYCStatus.PENDING)
    submission = _submission(user)
    with Session() as s:
        s.add(submission)
        s.commit()

    r = client.post(
        f"{API}/admin/kyc/reject",
        headers=auth_headers(admin),
        json={"submission_id": str(submission.id), "rejection_reason": "   "},
    )
    assert r.status_code == 400

    r = client.post(
        f"{API}/admin/kyc/reject",
        headers=auth_headers(admin),
        json={"submission_id": str(submission.id), "rejection_reason": "  Document expired "},
    )
    assert r.status_code == 200

    with Session() as s:
        db_user = s.get(User, user.id)
        assert db_user.kyc_status == KYCStatus.REJECTED
        assert db_user.kyc_rejection_reason == "Document expired"
        assert s.get(KYCSubmission, submission.id).rejection_reason == "Document expired"
